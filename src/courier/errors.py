"""Application-level exception types for courier.

The dispatch core itself never raises: unknown tags and stale request ids are
ignored. These errors cover wiring and configuration.
"""

from __future__ import annotations


class CourierError(Exception):
    """Base exception for courier."""


class ConfigurationError(CourierError):
    """Base exception for configuration and startup validation errors."""


class DuplicateUnitError(ConfigurationError):
    """Raised when two descriptors are registered under the same tag."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Unit '{tag}' is already registered")
        self.tag = tag


class UnknownUnitError(ConfigurationError):
    """Raised when wiring code asks for a tag nobody registered."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"No unit registered under '{tag}'")
        self.tag = tag


class CascadeLimitError(CourierError):
    """Raised when one dispatch exceeds the configured ``max_steps``."""

    def __init__(self, tag: str, steps: int) -> None:
        super().__init__(f"Dispatch of '{tag}' exceeded {steps} resolution steps")
        self.tag = tag
        self.steps = steps
