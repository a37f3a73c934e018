from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.api.security import require_api_key
from app.database import get_db
from app.errors import ValidationError
from app.models.jobs import JobCreate, JobOut
from app.services.job_fetcher import JobFetchService
from app.services.job_store import create_job
from app.services.query_builder import build_query_descriptor

router = APIRouter(prefix="/api/jobs", tags=["Jobs"], dependencies=[Depends(require_api_key)])


def get_job_service(request: Request) -> JobFetchService:
    return request.app.state.job_service


def _serialize(job) -> dict:
    return JobOut.model_validate(job).model_dump(mode="json")


@router.get("/fetch_jobs")
def fetch_jobs(
    request: Request,
    db: Session = Depends(get_db),
    service: JobFetchService = Depends(get_job_service),
):
    # Validation runs before anything touches upstream or the store
    descriptor = build_query_descriptor(request.query_params, request.app.state.settings)
    result = service.fetch_jobs(db, descriptor)
    return {
        "success": True,
        "message": "Job data fetching completed",
        "jobs": [_serialize(j) for j in result.jobs],
        "total": result.total,
        "pages": result.pages,
    }


@router.post("", status_code=201)
def add_job(payload: Any = Body(default=None), db: Session = Depends(get_db)):
    if not isinstance(payload, dict):
        raise ValidationError("Invalid job posting", "Request body must be a JSON object")
    try:
        job_in = JobCreate.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ValidationError("Invalid job posting", errors)

    job = create_job(db, job_in.to_posting())
    return {"success": True, "job": _serialize(job)}
