from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Success envelope shared by every endpoint:

        {"success": true, "message": "...", "data": ...}
    """

    success: bool = True
    message: str | None = None
    data: T | None = None


class ErrorResponse(BaseModel):
    """
    Failure envelope. `error` is a stable machine code
    (validation_error, not_found, conflict, ...).
    """

    success: bool = False
    message: str
    error: str
