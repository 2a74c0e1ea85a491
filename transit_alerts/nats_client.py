from __future__ import annotations

from typing import Optional

from nats.aio.client import Client as NATS
from nats.js import JetStreamContext
from nats.js.api import KeyValueConfig, StorageType
from nats.js.errors import BucketNotFoundError
from nats.js.kv import KeyValue

from .extraction import ALERT_TTL
from .logging_setup import get_logger


log = get_logger(__name__)


class NatsService:
    """NATS connection owning the parameter and alert key-value buckets."""

    def __init__(self, url: str, params_bucket: str, alerts_bucket: str, replicas: int = 1):
        self.url = url
        self.params_bucket = params_bucket
        self.alerts_bucket = alerts_bucket
        self.replicas = replicas

        self.nc: Optional[NATS] = None
        self.js: Optional[JetStreamContext] = None
        self.params_kv: Optional[KeyValue] = None
        self.alerts_kv: Optional[KeyValue] = None

    async def connect(self) -> None:
        self.nc = NATS()
        await self.nc.connect(servers=[self.url])
        self.js = self.nc.jetstream()

        self.params_kv = await self._ensure_kv(self.params_bucket, history=1)
        # Bucket TTL is a backstop; readers also drop rows past expires_at
        self.alerts_kv = await self._ensure_kv(
            self.alerts_bucket,
            history=1,
            ttl=ALERT_TTL.total_seconds(),
        )

    async def _ensure_kv(self, bucket: str, history: int, ttl: Optional[float] = None) -> KeyValue:
        assert self.js is not None
        try:
            kv = await self.js.key_value(bucket)
            log.info("kv_exists", bucket=bucket)
            return kv
        except BucketNotFoundError as e:
            log.info("kv_not_found", bucket=bucket, error=str(e))

        kv_config = KeyValueConfig(
            bucket=bucket,
            history=history,
            ttl=ttl,
            storage=StorageType.FILE,
            replicas=self.replicas,
        )
        kv = await self.js.create_key_value(config=kv_config)
        log.info("kv_created", bucket=bucket, ttl=ttl)
        return kv

    async def close(self) -> None:
        try:
            if self.nc and self.nc.is_connected:
                await self.nc.drain()
        finally:
            self.nc = None
            self.js = None
            self.params_kv = None
            self.alerts_kv = None
