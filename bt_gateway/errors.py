"""Error kinds surfaced to API clients and their HTTP status mapping."""

import enum
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    NOT_FOUND = 404
    INVALID = 400
    UPSTREAM = 500

    @property
    def status_code(self) -> int:
        return self.value


class GatewayFacadeError(Exception):
    """
    Failure to report back to the client.

    `errors` holds the gateway's structured validation errors (INVALID only);
    `details` is merged into the response body as-is.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        self.message = message
        self.errors = errors
        self.details = details or {}
        super().__init__(message)

    @classmethod
    def not_found(cls, message: str):
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def invalid(cls, message: str, errors=None):
        return cls(ErrorKind.INVALID, message, errors=errors)

    @classmethod
    def upstream(cls, message: str, details=None):
        return cls(ErrorKind.UPSTREAM, message, details=details)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.message}
        if self.errors is not None:
            body["errors"] = self.errors
        body.update(self.details)
        return body


@contextmanager
def translate_errors(message: str, kind: ErrorKind = ErrorKind.UPSTREAM):
    """Re-raise anything the gateway throws as `kind` with a generic message."""
    try:
        yield
    except GatewayFacadeError:
        raise
    except Exception as exc:
        logger.exception("%s: %s", message, exc)
        raise GatewayFacadeError(kind, message) from exc
