"""Route extraction and alert record building for feed posts."""

import re
from datetime import timedelta, timezone
from typing import NamedTuple, Optional, Union

from .types import AlertRecord, RawPost

# Alerts expire from the store one day after the post was created
ALERT_TTL = timedelta(hours=24)

ROUTE_PATTERN = re.compile(r"(?<=Route )\w+(?=:)", re.ASCII)


class RouteMatch(NamedTuple):
    route: str
    rest: str


class Skip(NamedTuple):
    """A post that produced no alert, and why."""
    reason: str


MALFORMED = Skip("malformed")
NO_ROUTE = Skip("no_route")


def extract_route(text: str) -> Optional[RouteMatch]:
    """Find the ``Route <TOKEN>:`` marker in a post body.

    Returns the route token and the message with every ``Route <TOKEN>: ``
    prefix removed, literal ``\\n`` sequences turned into spaces and the
    result stripped. Returns ``None`` when the text carries no marker.
    """
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")

    match = ROUTE_PATTERN.search(text)
    if match is None:
        return None

    route = match.group()
    rest = text.replace(f"Route {route}: ", "").replace("\\n", " ").strip()
    return RouteMatch(route, rest)


def build_alert(post: RawPost) -> Union[AlertRecord, Skip]:
    """Convert a feed post into an alert record, or a ``Skip`` naming why it has none."""
    if not post.is_valid():
        return MALFORMED

    match = extract_route(post.text)
    if match is None:
        return NO_ROUTE

    created_at = post.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    created_at = created_at.astimezone(timezone.utc).replace(microsecond=0)

    return AlertRecord(
        route=match.route,
        text=match.rest,
        created_at=created_at,
        expires_at=created_at + ALERT_TTL,
    )
