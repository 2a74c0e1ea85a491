from __future__ import annotations

from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, push_to_gateway


sync_runs_total = Counter(
    "alert_sync_runs_total",
    "Ingestion cycles by outcome",
    ["outcome"],
)

posts_fetched_total = Counter(
    "alert_sync_posts_fetched_total",
    "Posts returned by the feed search",
)

posts_skipped_total = Counter(
    "alert_sync_posts_skipped_total",
    "Posts dropped before storage",
    ["reason"],
)

alerts_merged_total = Counter(
    "alert_sync_alerts_merged_total",
    "Alert records merged into the store",
)

last_success_timestamp = Gauge(
    "alert_sync_last_success_timestamp",
    "Unix time of the last successful ingestion cycle",
)


def push_metrics(gateway: str, job: str, registry: Optional[CollectorRegistry] = None) -> None:
    """Push the current metric values to a Prometheus Pushgateway."""
    push_to_gateway(gateway, job=job, registry=registry or REGISTRY)
