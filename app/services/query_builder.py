"""
Turns raw fetch_jobs query-string parameters into a QueryDescriptor.

Rules run in a fixed order and the first failure wins, so a request with an
empty keyword and a bad page number reports the keyword. Nothing here touches
the network or the store.
"""

import math
import re
from datetime import date, datetime
from typing import Mapping, Optional

from app.config import Settings
from app.errors import QueryValidationError
from app.models.jobs import QueryDescriptor, SortField, SortOrder

SMART_SALARY = "smart"
_PLAIN_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?")


def _clean(params: Mapping[str, str], key: str) -> Optional[str]:
    """Missing and blank optional parameters are the same thing."""
    value = params.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _positive_int(raw: str) -> Optional[int]:
    # ASCII digits only, no sign, no "_" separators
    if not (raw.isascii() and raw.isdecimal()):
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 1 else None


def _non_negative_number(raw: str) -> Optional[float]:
    if not _PLAIN_NUMBER.fullmatch(raw):
        return None
    value = float(raw)
    return value if math.isfinite(value) else None


def _calendar_date(raw: str) -> Optional[date]:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def build_query_descriptor(params: Mapping[str, str], settings: Optional[Settings] = None) -> QueryDescriptor:
    settings = settings or Settings()

    # 1. keyword
    query = (params.get("query") or "").strip()
    if not query:
        raise QueryValidationError(
            "EmptyQuery",
            "Search keyword cannot be empty",
            "Please enter a valid search keyword",
        )

    # 2. upstream page count
    max_pages = settings.default_max_pages
    raw = _clean(params, "max_pages")
    if raw is not None:
        max_pages = _positive_int(raw)
        if max_pages is None:
            raise QueryValidationError(
                "InvalidPage",
                "Invalid page parameter",
                "Page number must be greater than 0",
            )

    # 3. salary floor ("smart" skips the numeric bound)
    min_salary = None
    raw = _clean(params, "min_salary")
    if raw is not None and raw != SMART_SALARY:
        min_salary = _non_negative_number(raw)
        if min_salary is None:
            raise QueryValidationError(
                "InvalidSalary",
                "Invalid minimum salary parameter",
                "Minimum salary must be a number greater than or equal to 0",
            )

    # 4. posted-since date
    date_posted = None
    raw = _clean(params, "date_posted")
    if raw is not None:
        date_posted = _calendar_date(raw)
        if date_posted is None:
            raise QueryValidationError(
                "InvalidDate",
                "Invalid date parameter",
                "date_posted must be a valid calendar date (YYYY-MM-DD)",
            )

    # 5. exact, case-sensitive truthiness
    remote_only = params.get("remote_only") == "true"

    max_salary = None
    raw = _clean(params, "max_salary")
    if raw is not None:
        max_salary = _non_negative_number(raw)
        if max_salary is None:
            raise QueryValidationError(
                "InvalidSalary",
                "Invalid maximum salary parameter",
                "Maximum salary must be a number greater than or equal to 0",
            )

    page = None
    raw = _clean(params, "page")
    if raw is not None:
        page = _positive_int(raw)
        if page is None:
            raise QueryValidationError(
                "InvalidPage",
                "Invalid page parameter",
                "Page number must be greater than 0",
            )

    limit = None
    raw = _clean(params, "limit")
    if raw is not None:
        limit = _positive_int(raw)
        if limit is None:
            raise QueryValidationError(
                "InvalidLimit",
                "Invalid limit parameter",
                "Limit must be an integer greater than 0",
            )
        limit = min(limit, settings.max_page_size)
    elif page is not None:
        limit = settings.default_page_size

    sort_by = _clean(params, "sort_by") or SortField.POSTED_AT.value
    sort_order = _clean(params, "sort_order") or SortOrder.DESC.value
    try:
        sort_by = SortField(sort_by)
        sort_order = SortOrder(sort_order)
    except ValueError:
        raise QueryValidationError(
            "InvalidSort",
            "Invalid sort parameter",
            f"sort_by must be one of {[f.value for f in SortField]} "
            f"and sort_order one of {[o.value for o in SortOrder]}",
        )

    return QueryDescriptor(
        query=query,
        location=_clean(params, "location"),
        remote_only=remote_only,
        min_salary=min_salary,
        max_salary=max_salary,
        date_posted=date_posted,
        max_pages=max_pages,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
