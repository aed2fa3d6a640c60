from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination metadata"""
    total: int
    limit: int
    offset: int
    has_more: bool

    @property
    def page(self) -> int:
        """Current page number (1-indexed)"""
        if self.limit == 0:
            return 1
        return (self.offset // self.limit) + 1


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    pagination: PaginationMeta


def paginated(items: list, *, total: int, limit: int, offset: int) -> PaginatedResponse:
    return PaginatedResponse(
        items=items,
        pagination=PaginationMeta(
            total=total,
            limit=limit,
            offset=offset,
            has_more=(offset + len(items) < total),
        ),
    )
