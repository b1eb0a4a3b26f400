from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def make_datetime_aware(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return dt
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    message: str
    data: Optional[T] = None


class PageMeta(CamelModel):
    total: int
    last_page: int
    current_page: int
    per_page: int
    prev: Optional[int] = None
    next: Optional[int] = None
    search_key: Optional[str] = None


def ok(message: str, data=None) -> dict:
    return {"success": True, "message": message, "data": data}


def failed(message: str, data=None) -> dict:
    return {"success": False, "message": message, "data": data}
