"""Success envelope returned by every endpoint"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
