"""Exception types raised across the package."""


class GaugeWatchError(Exception):
    """Base error for gauge watch failures."""


class StoreError(GaugeWatchError):
    """Snapshot or artifact file could not be created or written."""


class FetchError(GaugeWatchError):
    """Remote data could not be fetched after retries."""


class NotificationError(GaugeWatchError):
    """Outbound message could not be delivered."""
