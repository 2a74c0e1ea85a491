"""Shared test doubles and feed payload builders."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional

import httpx
from nats.errors import TimeoutError as NatsTimeoutError
from nats.js.errors import KeyNotFoundError, NoKeysError

SEARCH_URL = "https://feed.test/2/tweets/search/recent"
CURSOR_PARAM = "feed.last_post_id"


class FakeKeyValue:
    """In-memory stand-in for a JetStream KeyValue bucket."""

    def __init__(self) -> None:
        self.data: Dict[str, bytes] = {}
        self.puts: List[str] = []
        self.fail_puts_after: Optional[int] = None
        self.fail_gets = False
        self.key_filters: List[Optional[List[str]]] = []

    async def get(self, key: str):
        if self.fail_gets:
            raise NatsTimeoutError()
        if key not in self.data:
            raise KeyNotFoundError()
        return SimpleNamespace(key=key, value=self.data[key])

    async def put(self, key: str, value: bytes) -> int:
        if self.fail_puts_after is not None and len(self.puts) >= self.fail_puts_after:
            raise NatsTimeoutError()
        self.data[key] = value
        self.puts.append(key)
        return len(self.puts)

    async def keys(self, filters: Optional[List[str]] = None) -> List[str]:
        self.key_filters.append(filters)
        keys = [k for k in self.data if not filters or any(_subject_matches(f, k) for f in filters)]
        if not keys:
            raise NoKeysError()
        return keys


class InterleavingKeyValue(FakeKeyValue):
    """Yields to the event loop after each read, so concurrent writers interleave."""

    async def get(self, key: str):
        entry = await super().get(key) if key in self.data else None
        await asyncio.sleep(0)
        if entry is None:
            raise KeyNotFoundError()
        return entry


def _subject_matches(pattern: str, key: str) -> bool:
    """NATS subject matching: ``*`` is one token, a trailing ``>`` is one or more."""
    pattern_tokens = pattern.split(".")
    key_tokens = key.split(".")
    for i, token in enumerate(pattern_tokens):
        if token == ">":
            return len(key_tokens) > i
        if i >= len(key_tokens) or (token != "*" and token != key_tokens[i]):
            return False
    return len(key_tokens) == len(pattern_tokens)


def fresh_time(hours_ago: float = 1.0) -> datetime:
    """A whole-second UTC timestamp still inside the retention window."""
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return now - timedelta(hours=hours_ago)


def feed_post(post_id: str, text: str, created_at: datetime) -> dict:
    return {
        "id": post_id,
        "text": text,
        "created_at": created_at.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
        "edit_history_tweet_ids": [post_id],
    }


def feed_body(posts: List[dict], newest_id: Optional[str] = None) -> dict:
    meta = {"result_count": len(posts)}
    if posts:
        meta["newest_id"] = newest_id or posts[0]["id"]
        meta["oldest_id"] = posts[-1]["id"]
    body = {"meta": meta}
    if posts:
        body["data"] = posts
    return body


def json_response(body: dict, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode("utf-8"))
