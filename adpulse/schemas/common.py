"""
Response envelopes shared by the API routers
"""
from typing import Optional, Generic, TypeVar, List
from pydantic import BaseModel

T = TypeVar("T")


class ResponseBase(BaseModel):
    """success flag plus a human readable message"""
    success: bool = True
    message: Optional[str] = None


class DataResponse(ResponseBase, Generic[T]):
    """Single object, e.g. a business or a sync summary"""
    data: Optional[T] = None


class ListResponse(ResponseBase, Generic[T]):
    """Unpaginated list; total is len(data)"""
    data: List[T] = []
    total: int = 0
