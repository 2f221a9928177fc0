import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, TypeVar

from sqlalchemy import func
from sqlmodel import Session, select

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a listing plus the numbers the client needs to paginate."""

    items: List[T]
    total: int
    page: int
    limit: int
    pages: int = field(init=False)

    def __post_init__(self):
        self.pages = math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.page,
            "pages": self.pages,
            "total": self.total,
            "limit": self.limit,
        }


def paginate(session: Session, statement, page: int, limit: int) -> Page:
    """Run a filtered, ordered select for one page and count the full result."""
    page = max(1, page)
    limit = max(1, limit)

    count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
    total = session.exec(count_statement).one()

    items = session.exec(statement.offset((page - 1) * limit).limit(limit)).all()
    return Page(items=list(items), total=total, page=page, limit=limit)
