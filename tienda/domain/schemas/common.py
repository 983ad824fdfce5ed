# tienda/domain/schemas/common.py
from typing import Any, Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Pagina de resultados."""

    content: List[T]
    page: int = Field(..., ge=0, description="Numero de pagina (desde 0)")
    size: int = Field(..., ge=1, description="Elementos por pagina")
    total_elements: int
    total_pages: int

    @classmethod
    def of(cls, content: List[Any], page: int, size: int, total: int) -> "Page[T]":
        return cls(
            content=content,
            page=page,
            size=size,
            total_elements=total,
            total_pages=(total + size - 1) // size if total else 0,
        )


class MessageOut(BaseModel):
    message: str

