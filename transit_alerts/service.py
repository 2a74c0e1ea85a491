import argparse
import asyncio
import json
from typing import Dict, List, Optional

from .alert_store import AlertStore
from .config import Settings
from .cursor_store import FetchCursor, ParameterStore
from .errors import ConfigurationError
from .feed_client import FeedClient
from .logging_setup import configure_logging, get_logger
from .metrics import push_metrics
from .nats_client import NatsService
from .pipeline import IngestionPipeline
from .query import QueryService
from .types import Outcome, RouteAlert


log = get_logger(__name__)


class Service:
    """Process-wide context: connections, credential and the two entry operations.

    Built once per process and passed by reference; the feed token is read
    from the parameter store a single time in ``start``.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.nats = NatsService(
            url=settings.nats_url,
            params_bucket=settings.params_kv_bucket,
            alerts_bucket=settings.alerts_kv_bucket,
            replicas=settings.kv_replicas,
        )
        self.feed: Optional[FeedClient] = None
        self.pipeline: Optional[IngestionPipeline] = None
        self.query: Optional[QueryService] = None

    async def start(self, ingest: bool = True) -> None:
        """Connect to NATS; with ``ingest`` also load the feed token and build the pipeline."""
        await self.nats.connect()
        params = ParameterStore(self.nats.params_kv)
        store = AlertStore(self.nats.alerts_kv)
        self.query = QueryService(store)

        if not ingest:
            return

        token = await params.get(self.settings.feed_token_param)
        if not token:
            raise ConfigurationError(
                f"Feed bearer token parameter {self.settings.feed_token_param!r} is not set"
            )
        log.debug("token_loaded", prefix=token[:8])

        self.feed = FeedClient(
            search_url=self.settings.feed_search_url,
            query=self.settings.feed_query,
            bearer_token=token,
            timeout=self.settings.feed_timeout_seconds,
        )
        self.pipeline = IngestionPipeline(
            feed=self.feed,
            store=store,
            cursor=FetchCursor(params, self.settings.feed_cursor_param),
        )

    async def sync(self) -> Outcome:
        """Run one ingestion cycle."""
        assert self.pipeline is not None, "service started without ingest"
        return await self.pipeline.run()

    async def query_alerts(self, route: Optional[str] = None) -> Dict[str, RouteAlert]:
        assert self.query is not None
        return await self.query.query_alerts(route)

    async def close(self) -> None:
        if self.feed is not None:
            await self.feed.close()
        await self.nats.close()
        log.info("service_stop")


async def run_sync(settings: Settings) -> Outcome:
    service = Service(settings)
    try:
        await service.start()
        return await service.sync()
    finally:
        await service.close()


async def run_query(settings: Settings, route: Optional[str]) -> Dict[str, RouteAlert]:
    service = Service(settings)
    try:
        await service.start(ingest=False)
        return await service.query_alerts(route)
    finally:
        await service.close()


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Transit service alert sync")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("sync", help="Fetch new alert posts and merge them into the store")
    query = sub.add_parser("query", help="Print current alerts as JSON")
    query.add_argument("route", nargs="?", help="Route to look up (default: all routes)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level, settings.log_format)
    log.info("service_start", service=settings.service_name, command=args.command)

    if args.command == "query":
        alerts = asyncio.run(run_query(settings, args.route))
        print(json.dumps({route: alert.model_dump(mode="json") for route, alert in alerts.items()}, indent=2))
        return 0

    try:
        outcome = asyncio.run(run_sync(settings))
        log.info("sync_outcome", outcome=outcome.name, status=int(outcome))
        return 0 if outcome is Outcome.OK else 1
    finally:
        # Failed cycles are pushed too
        if settings.metrics_enabled and settings.pushgateway_url:
            try:
                push_metrics(settings.pushgateway_url, job=settings.service_name)
            except OSError as e:
                log.warning("metrics_push_failed", error=str(e))
