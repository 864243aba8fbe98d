"""
Response envelope shared by every endpoint.

Successful responses are wrapped as {"success": true, "message", "data"};
errors use the body built in pitaka.exceptions.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T


def ok(data, message: str | None = None) -> dict:
    """Wrap a service result; response_model validation does the serializing."""
    return {"success": True, "message": message, "data": data}
