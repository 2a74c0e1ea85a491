"""Pytest configuration and fixtures."""

from typing import Callable

import httpx
import pytest

from tests.helpers import CURSOR_PARAM, SEARCH_URL, FakeKeyValue
from transit_alerts.alert_store import AlertStore
from transit_alerts.cursor_store import FetchCursor, ParameterStore
from transit_alerts.feed_client import FeedClient


@pytest.fixture
def params_kv() -> FakeKeyValue:
    return FakeKeyValue()


@pytest.fixture
def alerts_kv() -> FakeKeyValue:
    return FakeKeyValue()


@pytest.fixture
def params(params_kv: FakeKeyValue) -> ParameterStore:
    return ParameterStore(params_kv)


@pytest.fixture
def cursor(params: ParameterStore) -> FetchCursor:
    return FetchCursor(params, CURSOR_PARAM)


@pytest.fixture
def store(alerts_kv: FakeKeyValue) -> AlertStore:
    return AlertStore(alerts_kv)


@pytest.fixture
def make_feed() -> Callable[[Callable[[httpx.Request], httpx.Response]], FeedClient]:
    """Build a FeedClient whose HTTP calls are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> FeedClient:
        return FeedClient(
            search_url=SEARCH_URL,
            query="from:MARTAservice route",
            bearer_token="test-token",
            timeout=10.0,
            transport=httpx.MockTransport(handler),
        )

    return _make
