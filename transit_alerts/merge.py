"""Per-route alert conflict resolution."""

from typing import Iterable, Optional

from .types import AlertRecord

SEPARATOR = "\n\n"


def merge_alerts(existing: Optional[AlertRecord], incoming: AlertRecord) -> AlertRecord:
    """Combine two alerts for one route, newer text first.

    The newer record keeps its timestamps. On equal timestamps the existing
    record stays primary, so merging a record with itself duplicates its text.
    """
    if existing is None:
        return incoming

    if incoming.created_at > existing.created_at:
        primary, secondary = incoming, existing
    else:
        primary, secondary = existing, incoming

    return AlertRecord(
        route=primary.route,
        text=SEPARATOR.join((primary.text, secondary.text)),
        created_at=primary.created_at,
        expires_at=primary.expires_at,
    )


def fold_alerts(records: Iterable[AlertRecord]) -> Optional[AlertRecord]:
    """Merge records left to right, starting from no alert."""
    result: Optional[AlertRecord] = None
    for record in records:
        result = merge_alerts(result, record)
    return result
