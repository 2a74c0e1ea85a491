"""Configuration module for the transit alert sync service."""

import os
from typing import Optional

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Application settings with environment variable support."""

    # NATS Configuration
    nats_url: str = Field(default="nats://localhost:4222")
    params_kv_bucket: str = Field(default="alert-sync-params")
    alerts_kv_bucket: str = Field(default="active-alerts")
    kv_replicas: int = Field(default=1)

    # Feed Configuration
    feed_search_url: str = Field(default="https://api.twitter.com/2/tweets/search/recent")
    feed_query: str = Field(default="from:MARTAservice route")
    feed_timeout_seconds: float = Field(default=10.0)
    feed_token_param: str = Field(default="feed.bearer_token")
    feed_cursor_param: str = Field(default="feed.last_post_id")

    # Service Configuration
    service_name: str = Field(default="transit-alert-sync")

    # Metrics Configuration
    metrics_enabled: bool = Field(default=False)
    pushgateway_url: Optional[str] = Field(default=None)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    def __init__(self, **kwargs):
        # Load from environment variables
        env_values = {}

        # Map environment variables to settings
        env_mapping = {
            "NATS_URL": "nats_url",
            "PARAMS_KV_BUCKET": "params_kv_bucket",
            "ALERTS_KV_BUCKET": "alerts_kv_bucket",
            "KV_REPLICAS": "kv_replicas",
            "FEED_SEARCH_URL": "feed_search_url",
            "FEED_QUERY": "feed_query",
            "FEED_TIMEOUT_SECONDS": "feed_timeout_seconds",
            "FEED_TOKEN_PARAM": "feed_token_param",
            "FEED_CURSOR_PARAM": "feed_cursor_param",
            "SERVICE_NAME": "service_name",
            "METRICS_ENABLED": "metrics_enabled",
            "PUSHGATEWAY_URL": "pushgateway_url",
            "LOG_LEVEL": "log_level",
            "LOG_FORMAT": "log_format",
        }

        for env_var, field_name in env_mapping.items():
            if env_var in os.environ:
                value = os.environ[env_var]

                # Convert types
                if field_name == "kv_replicas":
                    try:
                        value = int(value)
                    except ValueError:
                        pass
                elif field_name == "feed_timeout_seconds":
                    try:
                        value = float(value)
                    except ValueError:
                        pass
                elif field_name == "metrics_enabled":
                    value = value.lower() in ("true", "1", "yes", "on")

                env_values[field_name] = value

        # Merge kwargs with env values (kwargs take precedence)
        final_values = {**env_values, **kwargs}
        super().__init__(**final_values)
