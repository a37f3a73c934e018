"""
Persistence and read-path for postings.

Writes are idempotent: each row carries a dedup_key with a UNIQUE constraint
and is inserted with ON CONFLICT DO NOTHING, so repeated or concurrent fetches
of the same upstream posting leave exactly one row.
"""

import math
from datetime import datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import String, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DataError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.errors import StoreUnavailableError, ValidationError
from app.logger import get_logger
from app.models.jobs import Job, JobPosting, QueryDescriptor, SortField, SortOrder
from app.services.normalization import compute_dedup_key
from app.services.text import POSTGRES_TITLE_COLLATION, SQLITE_FOLD_FUNCTION, SQLITE_TITLE_COLLATION, fold

logger = get_logger(__name__)


def _row(posting: JobPosting) -> Dict[str, Any]:
    row = posting.model_dump()
    row["dedup_key"] = compute_dedup_key(posting.title, posting.company, posting.apply_link)
    return row


def _insert_ignoring_duplicates(db: Session, row: Dict[str, Any]) -> int:
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(Job).values(**row).on_conflict_do_nothing(index_elements=["dedup_key"])
    elif dialect == "sqlite":
        stmt = sqlite_insert(Job).values(**row).on_conflict_do_nothing(index_elements=["dedup_key"])
    else:
        if db.scalar(select(Job.id).where(Job.dedup_key == row["dedup_key"])) is not None:
            return 0
        stmt = insert(Job).values(**row)
    return db.execute(stmt).rowcount


def save_jobs(db: Session, postings: Iterable[JobPosting]) -> int:
    """
    Insert every posting not already stored; returns how many were new.

    Each row commits on its own so one bad record is logged and skipped
    without losing the rest of the batch. Only an unreachable store aborts.
    """
    rows: Dict[str, Dict[str, Any]] = {}
    for posting in postings:
        row = _row(posting)
        rows.setdefault(row["dedup_key"], row)

    inserted = 0
    for row in rows.values():
        try:
            inserted += _insert_ignoring_duplicates(db, row)
            db.commit()
        except OperationalError as e:
            db.rollback()
            logger.error(f"[DB] Store unavailable while saving jobs: {e}")
            raise StoreUnavailableError("Job store unavailable", str(e.orig)) from e
        except (IntegrityError, DataError) as e:
            db.rollback()
            logger.warning(f"[SKIP] Could not store '{row['title']}' ({row['apply_link']}): {e.orig}")

    logger.info(f"[DB] Inserted {inserted} new of {len(rows)} fetched jobs.")
    return inserted


def create_job(db: Session, posting: JobPosting) -> Job:
    row = _row(posting)
    try:
        inserted = _insert_ignoring_duplicates(db, row)
        db.commit()
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError("Job store unavailable", str(e.orig)) from e
    except (IntegrityError, DataError) as e:
        db.rollback()
        raise ValidationError("Invalid job posting", str(e.orig)) from e

    if not inserted:
        raise ValidationError(
            "Job posting already exists",
            "A posting with the same title, company and apply_link is already stored",
        )
    return db.scalars(select(Job).where(Job.dedup_key == row["dedup_key"])).one()


# ---------- READ PATH ----------

def _contains(column, text: str, dialect: Optional[str]):
    if dialect == "sqlite":
        folded = getattr(func, SQLITE_FOLD_FUNCTION)(column, type_=String)
        return folded.contains(fold(text), autoescape=True)
    return column.icontains(text, autoescape=True)


def _title_sort_key(dialect: Optional[str]):
    if dialect == "sqlite":
        return Job.title.collate(SQLITE_TITLE_COLLATION)
    if dialect == "postgresql":
        return Job.title.collate(POSTGRES_TITLE_COLLATION)
    return func.lower(Job.title)


def build_filters(descriptor: QueryDescriptor, dialect: Optional[str] = None) -> List[Any]:
    filters = [_contains(Job.title, descriptor.query, dialect)]

    if descriptor.remote_only:
        filters.append(_contains(Job.location, "remote", dialect))
    elif descriptor.location:
        filters.append(_contains(Job.location, descriptor.location, dialect))

    # "Not specified" counts as 0 here exactly as it does in the salary sort
    if descriptor.min_salary is not None:
        filters.append(func.coalesce(Job.salary_min, 0) >= descriptor.min_salary)
    if descriptor.max_salary is not None:
        filters.append(func.coalesce(Job.salary_max, Job.salary_min, 0) <= descriptor.max_salary)

    if descriptor.date_posted is not None:
        since = datetime.combine(descriptor.date_posted, time.min, tzinfo=timezone.utc)
        filters.append(Job.posted_at >= since)

    return filters


def build_ordering(descriptor: QueryDescriptor, dialect: Optional[str] = None) -> List[Any]:
    if descriptor.sort_by == SortField.SALARY:
        key = func.coalesce(Job.salary_min, 0)
    elif descriptor.sort_by == SortField.TITLE:
        key = _title_sort_key(dialect)
    else:
        key = Job.posted_at

    primary = key.desc() if descriptor.sort_order == SortOrder.DESC else key.asc()
    return [primary, Job.id.asc()]


def query_jobs(db: Session, descriptor: QueryDescriptor) -> Tuple[List[Job], int, int]:
    """Returns (jobs for the requested page, total matches, page count)."""
    dialect = db.get_bind().dialect.name
    filters = build_filters(descriptor, dialect)
    try:
        total = db.scalar(select(func.count()).select_from(Job).where(*filters))
        stmt = select(Job).where(*filters).order_by(*build_ordering(descriptor, dialect))
        offset = 0
        if descriptor.paginated:
            offset = ((descriptor.page or 1) - 1) * descriptor.limit
            stmt = stmt.offset(offset).limit(descriptor.limit)
        # Pages past the end are empty; the offset may not even fit the store's integer type
        jobs = list(db.scalars(stmt)) if offset < total else []
    except OperationalError as e:
        logger.error(f"[DB] Store unavailable while querying jobs: {e}")
        raise StoreUnavailableError("Job store unavailable", str(e.orig)) from e

    if descriptor.paginated:
        pages = math.ceil(total / descriptor.limit) if total else 0
    else:
        pages = 1 if total else 0
    return jobs, total, pages
