"""Response envelopes: `{data}` for single resources, `{data, meta}` for pages."""


from typing import Generic, TypeVar

from pydantic import BaseModel

from propertyhub.core.pagination import PageMeta

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    meta: PageMeta


class MessageResponse(BaseModel):
    message: str


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    return {"data": items, "meta": PageMeta.of(total, page, limit)}
