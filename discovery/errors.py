"""Exceptions raised by the discovery pipeline and swipe history."""


class DiscoveryError(Exception):
    """Base class for discovery errors."""


class GeocodeUnavailable(DiscoveryError):
    """Remote geocoding lookup failed (timeout, HTTP error, or non-OK status)."""


class EmptyHistory(DiscoveryError):
    """Undo requested but the user has no swipes left in this mode."""

    def __init__(self, user_id: int, mode: str):
        self.user_id = user_id
        self.mode = mode
        super().__init__(f"No swipes to undo for user {user_id} in {mode}")


class UnknownUserError(DiscoveryError):
    """Requested user has no stored profile."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class InvalidSwipe(DiscoveryError):
    """Swipe request that can never be recorded (e.g. swiping on yourself)."""
