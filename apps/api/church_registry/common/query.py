"""Filter, sort and pagination helpers shared by the list endpoints."""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Optional

from fastapi import Query
from pydantic.alias_generators import to_snake
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from church_registry.common.schemas import Pagination
from church_registry.core.config import settings
from church_registry.core.errors import ValidationAPIError


def parse_sort(
    sort: Optional[str],
    allowed: dict[str, ColumnElement[Any]],
    default: str,
) -> list[ColumnElement[Any]]:
    """
    Translate a sort expression into ORDER BY clauses.

    ``sort`` is a comma- or space-separated list of field names, each
    optionally prefixed with ``-`` for descending order, e.g.
    ``"-dateOfDeath"`` or ``"fatherName,first_name"``. camelCase names are
    matched against the snake_case keys of ``allowed``.

    Raises:
        ValidationAPIError: If a field is not in ``allowed``
    """
    expression = (sort or "").strip() or default
    clauses = []
    for token in expression.replace(",", " ").split():
        descending = token.startswith("-")
        name = to_snake(token.lstrip("-+"))
        column = allowed.get(name)
        if column is None:
            raise ValidationAPIError(
                f"Cannot sort by '{name}'",
                errors=[
                    {
                        "field": "sort",
                        "message": f"Allowed fields: {', '.join(sorted(allowed))}",
                    }
                ],
            )
        clauses.append(column.desc() if descending else column.asc())
    return clauses


def apply_date_range(
    stmt: Select,
    column: ColumnElement[Any],
    start: Optional[date],
    end: Optional[date],
) -> Select:
    """Restrict ``column`` to [start, end], both bounds inclusive."""
    if start and end and start > end:
        raise ValidationAPIError(
            "startDate must not be after endDate",
            errors=[{"field": "startDate", "message": "must be <= endDate"}],
        )
    if start:
        stmt = stmt.where(column >= start)
    if end:
        stmt = stmt.where(column <= end)
    return stmt


def contains_pattern(value: str) -> str:
    """LIKE pattern for a case-insensitive substring match."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def icontains(column: ColumnElement[Any], value: str) -> ColumnElement[bool]:
    return column.ilike(contains_pattern(value), escape="\\")


class ListParams:
    """Paging and sort query parameters shared by every list endpoint."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(
            settings.default_page_size, ge=1, le=settings.max_page_size
        ),
        sort: Optional[str] = Query(
            None, description="Field name, prefix with '-' for descending"
        ),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort


def paginate(
    db: Session,
    stmt: Select,
    page: int,
    limit: int,
    order_by: list[ColumnElement[Any]],
    tiebreaker: ColumnElement[Any],
) -> tuple[list[Any], Pagination]:
    """
    Run ``stmt`` for one page and count the full result set.

    Args:
        db: Database session
        stmt: Filtered select of a single entity
        page: 1-based page number
        limit: Page size
        order_by: Sort clauses from ``parse_sort``
        tiebreaker: Unique column appended so pages never overlap

    Returns:
        Rows of the requested page and the pagination block
    """
    total = db.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()

    rows = db.execute(
        stmt.order_by(*order_by, tiebreaker)
        .offset((page - 1) * limit)
        .limit(limit)
    ).scalars().all()

    return list(rows), Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
