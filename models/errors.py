"""Exception types raised by the outreach engine."""


class RceError(Exception):
    """Base class for engine errors."""


class StoreError(RceError):
    """A read or write against the persistent store failed."""


class TransportError(RceError):
    """The outbound message transport could not deliver a message."""


class UnknownItemError(RceError, KeyError):
    """An item key that is not in the interval catalog."""

    def __init__(self, key: str, available=None):
        self.key = key
        self.available = list(available or [])
        super().__init__(key)

    def __str__(self) -> str:
        if self.available:
            return f"Unknown item key '{self.key}'. Available: {', '.join(self.available)}"
        return f"Unknown item key '{self.key}'"
