"""
CourseHub Backend: Pagination & Search Helpers
==============================================

What:  Page/limit pagination and case-insensitive substring search shared
       by the forum, chat and notification services.

Pagination Strategy (Offset-Based):
    The clients page with numbered pages ("page 3 of 7"), so we use
    OFFSET/LIMIT plus a COUNT(*) with the same filters:

        SELECT ... WHERE <filters> ORDER BY <order> OFFSET (page-1)*limit LIMIT limit
        SELECT count(*) FROM <entity> WHERE <filters>

    pages = ceil(total / limit). A page past the end yields an empty list
    with unchanged totals.
"""

import logging
import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.exceptions import DatabaseError
from coursehub.schemas.common import Pagination

logger = logging.getLogger(__name__)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(term: Optional[str], *columns: Any) -> Optional[ColumnElement[bool]]:
    """
    Case-insensitive substring match of `term` against any of `columns`.

    Returns None for an empty/blank term so callers can skip the filter.
    """
    if term is None or not term.strip():
        return None
    pattern = f"%{escape_like(term.strip())}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


async def paginate(
    db: AsyncSession,
    entity: Any,
    *,
    where: Iterable[ColumnElement[bool]] = (),
    order_by: Sequence[Any] = (),
    options: Sequence[Any] = (),
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Any], Pagination]:
    """
    Run one page of `SELECT entity WHERE ... ORDER BY ...` plus its count.

    Args:
        db:        Async session of the current request
        entity:    Mapped class to select
        where:     Filter expressions (ANDed)
        order_by:  ORDER BY expressions
        options:   Loader options (selectinload(...)) for the page query
        page:      1-based page number
        limit:     Items per page

    Raises:
        DatabaseError: either query failed
    """
    conditions = [c for c in where if c is not None]
    try:
        count_query = select(func.count()).select_from(entity).where(*conditions)
        total = (await db.execute(count_query)).scalar() or 0

        query = (
            select(entity)
            .options(*options)
            .where(*conditions)
            .order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list((await db.execute(query)).scalars().all())
    except SQLAlchemyError as e:
        logger.error("Database error paginating %s: %s", getattr(entity, "__name__", entity), e,
                     exc_info=True)
        raise DatabaseError(
            message="Could not retrieve the requested page. Please try again.",
            context={"error_type": type(e).__name__},
        ) from e

    return items, Pagination(total=total, page=page, pages=page_count(total, limit))
