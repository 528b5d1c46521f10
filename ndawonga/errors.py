"""Error taxonomy shared by the stores, the chat responder and the API."""

from __future__ import annotations


class NdawongaError(Exception):
    """Base class for errors raised by the domain layer."""


class StorageFailure(NdawongaError):
    """The persistence or lookup collaborator was unreachable or rejected the call."""


class NotFound(NdawongaError):
    """A lookup by identifier matched nothing."""


class ValidationGap(NdawongaError):
    """A required field is absent or malformed."""
