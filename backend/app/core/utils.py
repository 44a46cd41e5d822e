"""
Response bodies shared by routes and exception handlers.
"""
from typing import Any, Dict
from app.core.exceptions import LedgerError, NotFoundError


def format_response(data: Any, message: str = "Success") -> Dict[str, Any]:
    """Wrap a payload with a human-readable message."""
    return {
        "message": message,
        "data": data
    }


def format_error(exc: LedgerError) -> Dict[str, Any]:
    """Error body for a ledger exception. Not-found errors name the resource."""
    response = {"error": str(exc)}
    if isinstance(exc, NotFoundError):
        response["details"] = {"resource": exc.resource}
    return response
