"""
Error taxonomy for the listing layer.
- ValidationError: bad or missing caller input (HTTP 400)
- ConfigurationError: unknown view/entity wiring, raised while declaring listings
- StoreError: the relational store failed (HTTP 500, details not exposed)
"""
from typing import Optional


class PortalError(Exception):
    """Base class for errors raised by the listing layer."""


class ValidationError(PortalError):
    """Caller input that cannot be used. Never retried."""

    def __init__(self, field: Optional[str], reason: str):
        self.field = field
        self.reason = reason
        message = f"{field}: {reason}" if field else reason
        super().__init__(message)


class ConfigurationError(PortalError):
    """A programming error in projection or listing declarations."""


class StoreError(PortalError):
    """The query executor could not complete a query."""
