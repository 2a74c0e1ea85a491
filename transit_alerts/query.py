"""Read path: current composite alert per route."""

from collections import defaultdict
from typing import Dict, List, Optional

from .alert_store import AlertStore
from .logging_setup import get_logger
from .merge import fold_alerts
from .types import AlertRecord, RouteAlert

log = get_logger(__name__)


class QueryService:
    def __init__(self, store: AlertStore) -> None:
        self.store = store

    async def query_alerts(self, route: Optional[str] = None) -> Dict[str, RouteAlert]:
        """Alerts for one route when given, otherwise for every route with alerts."""
        if route:
            return await self.query_by_route(route)
        return await self.query_all()

    async def query_by_route(self, route: str) -> Dict[str, RouteAlert]:
        """Fold the route's rows newest first; a route with no rows maps to an empty alert."""
        merged = fold_alerts(await self.store.query(route))
        log.debug("query_by_route", route=route, found=merged is not None)
        if merged is None:
            return {route: RouteAlert()}
        return {route: RouteAlert.from_record(merged)}

    async def query_all(self) -> Dict[str, RouteAlert]:
        by_route: Dict[str, List[AlertRecord]] = defaultdict(list)
        for record in await self.store.scan():
            by_route[record.route].append(record)

        result: Dict[str, RouteAlert] = {}
        for route, records in by_route.items():
            # Same order as query_by_route so both paths agree
            records.sort(key=lambda r: r.created_at, reverse=True)
            result[route] = RouteAlert.from_record(fold_alerts(records))

        log.debug("query_all", routes=len(result))
        return result
