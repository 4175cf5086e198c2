"""
Tracker Errors
Exception hierarchy shared by the store, services and controllers
"""


class TrackerError(Exception):
    """Base class for all deepwork-tracker errors"""


class ConfigError(TrackerError):
    """Invalid or missing configuration value"""


class StoreError(TrackerError):
    """A session store operation failed"""


class StoreUnavailableError(StoreError):
    """The session store could not be reached"""
