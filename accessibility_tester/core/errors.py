from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """
    Where an audit error happened, which decides how far it propagates.
    """

    VALIDATION = "validation"
    PAGE = "page"
    LIFECYCLE = "lifecycle"


class AuditError(Exception):
    kind: ErrorKind = ErrorKind.PAGE

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url


class AuditValidationError(AuditError):
    """The request was rejected before any browser work started."""

    kind = ErrorKind.VALIDATION


class PageAuditError(AuditError):
    """Navigation or evaluation of a single URL failed."""

    kind = ErrorKind.PAGE


class AuditLifecycleError(AuditError):
    """Shared browser setup failed; the whole invocation is aborted."""

    kind = ErrorKind.LIFECYCLE
