from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

def ok(data=None, message: str | None = None) -> dict:
    return {"success": True, "message": message, "data": data}
