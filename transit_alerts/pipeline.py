"""One ingestion cycle: fetch new posts, merge their alerts, advance the cursor."""

import time

from .alert_store import AlertStore
from .cursor_store import FetchCursor
from .errors import AlertStoreError, FeedError
from .extraction import Skip, build_alert
from .feed_client import FeedClient
from .logging_setup import get_logger
from .merge import merge_alerts
from .metrics import (
    alerts_merged_total,
    last_success_timestamp,
    posts_fetched_total,
    posts_skipped_total,
    sync_runs_total,
)
from .types import AlertRecord, Outcome

log = get_logger(__name__)

# Outcome label for cycles aborted by a storage failure
STORE_ERROR = "STORE_ERROR"


class IngestionPipeline:
    """Pulls new feed posts into the alert store.

    The cursor is only advanced after every record of the batch has been
    merged, so a storage failure leaves the cycle retryable. Posts that are
    skipped still count as seen: the cursor moves to the feed's newest id.
    """

    def __init__(self, feed: FeedClient, store: AlertStore, cursor: FetchCursor) -> None:
        self.feed = feed
        self.store = store
        self.cursor = cursor

    async def run(self) -> Outcome:
        since_id = await self.cursor.load()

        try:
            page = await self.feed.search(since_id)
        except FeedError as e:
            log.error("feed_request_failed", since_id=since_id, error=str(e))
            sync_runs_total.labels(outcome=Outcome.BAD_GATEWAY.name).inc()
            return Outcome.BAD_GATEWAY

        log.info("feed_posts_found", result_count=page.result_count)
        posts_fetched_total.inc(len(page.posts))

        stored = 0
        try:
            for post in page.posts:
                result = build_alert(post)
                if isinstance(result, Skip):
                    log.warning("post_skipped", reason=result.reason, post_id=post.id, text=post.text)
                    posts_skipped_total.labels(reason=result.reason).inc()
                    continue
                await self._merge(result)
                stored += 1
        except AlertStoreError as e:
            log.error("alert_store_failed", stored=stored, error=str(e))
            sync_runs_total.labels(outcome=STORE_ERROR).inc()
            raise

        if page.result_count > 0 and page.newest_id:
            await self.cursor.save(page.newest_id)

        log.info(
            "sync_complete",
            fetched=len(page.posts),
            stored=stored,
            skipped=len(page.posts) - stored,
            cursor=page.newest_id if page.result_count > 0 else since_id,
        )
        sync_runs_total.labels(outcome=Outcome.OK.name).inc()
        last_success_timestamp.set(time.time())
        return Outcome.OK

    async def _merge(self, record: AlertRecord) -> None:
        # Read and write are not atomic; a single writer per store is assumed
        existing = await self.store.get(record.route, record.created_at)
        merged = merge_alerts(existing, record)
        await self.store.put(merged)
        alerts_merged_total.inc()
        log.info("alert_merged", route=merged.route, created_at=merged.created_at.isoformat())
