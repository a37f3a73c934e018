from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from app.errors import InternalError, JobMarketError
from app.logger import get_logger
from app.models.jobs import Job, QueryDescriptor
from app.services.job_store import query_jobs, save_jobs
from app.services.jsearch_client import JSearchClient
from app.services.normalization import normalize_records

logger = get_logger(__name__)


@dataclass
class FetchResult:
    jobs: List[Job]
    total: int
    pages: int
    inserted: int


class JobFetchService:
    """
    Fetch-and-merge for one search request:
    upstream fetch -> normalize -> idempotent persist -> filtered store read.

    The upstream fetch runs on every call; the store accumulates everything
    ever fetched and the read always goes against the whole store.
    """

    def __init__(self, client: JSearchClient):
        self.client = client

    def fetch_jobs(self, db: Session, descriptor: QueryDescriptor) -> FetchResult:
        logger.info(
            f"[RUN] fetch_jobs query={descriptor.query!r} location={descriptor.location!r} "
            f"max_pages={descriptor.max_pages}"
        )
        try:
            records = self.client.search(
                query=descriptor.upstream_query,
                num_pages=descriptor.max_pages,
            )
            postings = normalize_records(records)
            inserted = save_jobs(db, postings)
            jobs, total, pages = query_jobs(db, descriptor)
        except JobMarketError:
            raise
        except Exception as e:
            logger.exception(f"[ERROR] fetch_jobs failed: {e}")
            raise InternalError("Internal server error", str(e)) from e

        logger.info(f"[DONE] fetch_jobs returned {len(jobs)} of {total} matches (new={inserted})")
        return FetchResult(jobs=jobs, total=total, pages=pages, inserted=inserted)
