"""Exception types raised by the alert sync service."""


class AlertSyncError(Exception):
    """Base class for alert sync failures."""


class FeedError(AlertSyncError):
    """The search feed could not be reached or returned an unusable response."""


class AlertStoreError(AlertSyncError):
    """An alert row could not be read from or written to the store."""


class ConfigurationError(AlertSyncError):
    """Required configuration or credentials are missing."""


class ParameterStoreError(AlertSyncError):
    """A parameter (cursor or credential) could not be read or written."""
