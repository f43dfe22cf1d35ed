"""
Schemas shared by every endpoint group.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body produced by the exception handlers."""
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None


def page_count(total: int, page_size: int) -> int:
    """Number of pages for a listing."""
    if total == 0 or page_size == 0:
        return 0
    return (total + page_size - 1) // page_size
