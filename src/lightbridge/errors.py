"""Exception types raised by lightbridge."""

from __future__ import annotations


class LightbridgeError(Exception):
    """Base class for lightbridge errors."""


class DiscoveryError(LightbridgeError):
    """The network scan could not produce a snapshot."""


class BindingError(LightbridgeError):
    """No capability binding exists for a device description."""

    def __init__(self, description: str) -> None:
        super().__init__(f"Unknown capability description: {description!r}")
        self.description = description


class MalformedRecordError(LightbridgeError):
    """A persisted accessory record failed validation."""

    def __init__(self, key: str, detail: str) -> None:
        super().__init__(f"Malformed accessory record {key!r}: {detail}")
        self.key = key
        self.detail = detail
