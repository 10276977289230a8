"""
Exception hierarchy for NSX distributed firewall operations.

Every error raised by the transport, the repositories and the cleanup
orchestrator derives from NSXError, so callers can catch the whole family
in one place (the API layer maps each subclass to an HTTP status).
"""
from typing import Optional


class NSXError(Exception):
    """Base class for all NSX DFW errors."""


class NSXConnectionError(NSXError):
    """The NSX manager could not be reached (DNS, TLS, timeout, refused)."""


class IncorrectResponseCodeError(NSXError):
    """The NSX manager answered with a status code the call did not expect."""

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RevisionConflictError(IncorrectResponseCodeError):
    """A write presented a stale _revision (HTTP 412 Precondition Failed)."""


class CreateError(NSXError):
    """The store rejected the creation of a firewall section."""


class ObjectNotFound(NSXError):
    """A section or rule referenced by an operation does not exist."""


class OperationError(NSXError):
    """The store did not acknowledge a create or update."""


class IntegrityError(NSXError):
    """The store acknowledged a write but the expected state is not observable."""


class DuplicateNameError(IntegrityError):
    """More than one object carries a display name this integration treats as unique."""


class TemplateParseError(NSXError):
    """A workload template could not be parsed."""
