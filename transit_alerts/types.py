"""Type definitions for the alert sync service."""

from datetime import datetime
from enum import IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Outcome(IntEnum):
    """Result of one ingestion cycle, expressed as an HTTP-style status."""
    OK = 200
    BAD_GATEWAY = 502


class RawPost(BaseModel):
    """Post as returned by the feed search endpoint."""
    id: Optional[str] = None
    text: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("id", "text", "created_at", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value:
            return None
        return value

    def is_valid(self) -> bool:
        return bool(self.id) and bool(self.text) and self.created_at is not None


class SearchMeta(BaseModel):
    newest_id: Optional[str] = None
    oldest_id: Optional[str] = None
    result_count: int = 0


class SearchPage(BaseModel):
    """One page of feed search results (newest first)."""
    model_config = ConfigDict(populate_by_name=True)

    posts: List[RawPost] = Field(default_factory=list, alias="data")
    meta: SearchMeta = Field(default_factory=SearchMeta)

    @property
    def newest_id(self) -> Optional[str]:
        return self.meta.newest_id

    @property
    def result_count(self) -> int:
        return self.meta.result_count


class AlertRecord(BaseModel):
    """A single route alert as stored and merged."""
    model_config = ConfigDict(frozen=True)

    route: str = Field(min_length=1)
    text: str
    created_at: datetime
    expires_at: datetime

    @field_serializer("created_at", "expires_at")
    def _epoch_seconds(self, value: datetime) -> int:
        return int(value.timestamp())


class RouteAlert(BaseModel):
    """Current composite alert for a route; empty when the route has none."""
    text: str = ""
    last_updated: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: AlertRecord) -> "RouteAlert":
        return cls(
            text=record.text,
            last_updated=record.created_at,
            expires_at=record.expires_at,
        )
