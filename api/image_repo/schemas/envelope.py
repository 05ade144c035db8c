"""Uniform result envelope returned by every endpoint."""

from typing import Any, Dict

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True


def create_success(**data: Any) -> Dict[str, Any]:
    """Build a success envelope carrying the given payload.

    Examples:
        >>> create_success(details={"id": "abc123"})
        {'success': True, 'details': {'id': 'abc123'}}
    """
    return {"success": True, **data}


def create_error(message: str, **data: Any) -> Dict[str, Any]:
    """Build a failure envelope with a human-readable message.

    Examples:
        >>> create_error("No images provided.")
        {'success': False, 'message': 'No images provided.'}
    """
    return {"success": False, "message": message, **data}
