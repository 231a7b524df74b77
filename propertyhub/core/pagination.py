"""Page/limit/sort query parameters shared by every list endpoint."""


import math
from typing import Any

from fastapi import Query
from pydantic import BaseModel


def _to_snake(name: str) -> str:
    # Clients send camelCase sort keys (createdAt, price, dueDate)
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name).lstrip("_")


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=createdAt&order=desc`.

    Unknown sort columns fall back to ``created_at`` inside the repository.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
        sort: str = Query(default="createdAt", description="Sort field"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = _to_snake(sort)
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def window(self) -> dict[str, Any]:
        """Keyword arguments for ``BaseRepository.list``-style queries."""
        return {
            "offset": self.offset,
            "limit": self.limit,
            "order_by": self.sort,
            "order": self.order,
        }


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def of(cls, total: int, page: int, limit: int) -> "PageMeta":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 1)
