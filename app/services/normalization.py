import hashlib
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.logger import get_logger
from app.models.jobs import JobPosting
from app.services.salary import coerce_amount

logger = get_logger(__name__)

DEFAULT_LOCATION = "Remote"


def _normalize_text(text: Optional[str]) -> str:
    return re.sub(r"\s+", " ", (text or "").lower()).strip()


def compute_dedup_key(title: str, company: str, apply_link: str) -> str:
    """
    SHA256 of normalized title, company and apply link. Two fetches of the
    same upstream posting always produce the same key.
    """
    composite = "||".join(_normalize_text(p) for p in (title, company, apply_link))
    return hashlib.sha256(composite.encode("utf-8")).hexdigest()


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _posted_at(value: Any) -> Optional[datetime]:
    # job_posted_at_timestamp is UNIX seconds
    if value is None or isinstance(value, bool):
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def normalize_record(item: Dict[str, Any]) -> JobPosting:
    """
    Map one upstream JSearch record onto the internal posting schema.
    Raises pydantic.ValidationError when the record can't form a posting.
    """
    location = _text(item.get("job_city")) or _text(item.get("job_country")) or DEFAULT_LOCATION

    salary_min = coerce_amount(item.get("job_min_salary"))
    salary_max = coerce_amount(item.get("job_max_salary")) if salary_min is not None else None
    if salary_max is not None and salary_max < salary_min:
        salary_min, salary_max = salary_max, salary_min

    remote = item.get("job_is_remote")
    if not isinstance(remote, bool):
        remote = "remote" in location.lower()

    return JobPosting(
        title=_text(item.get("job_title")),
        company=_text(item.get("employer_name")),
        location=location,
        salary_min=salary_min,
        salary_max=salary_max,
        salary_currency=_text(item.get("job_salary_currency")) or None,
        apply_link=_text(item.get("job_apply_link")),
        description=_text(item.get("job_description")) or None,
        remote=remote,
        posted_at=_posted_at(item.get("job_posted_at_timestamp")),
    )


def normalize_records(items: List[Dict[str, Any]]) -> List[JobPosting]:
    postings: List[JobPosting] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning(f"[NORMALIZE] Skipping record #{idx}: not an object")
            continue
        try:
            postings.append(normalize_record(item))
        except ValidationError as e:
            fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in e.errors())
            logger.warning(f"[NORMALIZE] Skipping record #{idx} ({item.get('job_title')!r}): invalid {fields}")

    dropped = len(items) - len(postings)
    if dropped:
        logger.warning(f"[CLEAN] Dropped {dropped} invalid upstream records")
    return postings
