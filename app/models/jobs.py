from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from app.database import Base
from app.services.salary import format_salary, parse_salary_range


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    dedup_key = Column(String(64), unique=True, nullable=False, index=True)
    title = Column(String, nullable=False)
    company = Column(String, nullable=False)
    location = Column(String, nullable=False)
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String(8), nullable=True)
    apply_link = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    remote = Column(Boolean, nullable=False, default=False)
    posted_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# ---------- NORMALIZED POSTING ----------

class JobPosting(BaseModel):
    """One posting in the internal schema, ready to persist."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    company: str = ""
    location: str = "Remote"
    salary_min: Optional[float] = Field(default=None, ge=0)
    salary_max: Optional[float] = Field(default=None, ge=0)
    salary_currency: Optional[str] = None
    apply_link: str = Field(min_length=1)
    description: Optional[str] = None
    remote: bool = False
    posted_at: datetime

    @field_validator("posted_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def salary(self) -> str:
        return format_salary(self.salary_min, self.salary_max)


class JobCreate(JobPosting):
    """
    Body of POST /api/jobs. Accepts the display form ``salary`` ("60000-80000")
    as well as explicit salary_min / salary_max.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    company: str = Field(min_length=1)
    salary_text: Optional[str] = Field(default=None, alias="salary")
    remote: Optional[bool] = None
    posted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def derive_salary_and_remote(self):
        if self.salary_min is None and self.salary_text:
            self.salary_min, self.salary_max = parse_salary_range(self.salary_text)
        if self.salary_min is not None and self.salary_max is not None and self.salary_max < self.salary_min:
            raise ValueError("salary_max must be greater than or equal to salary_min")
        if self.remote is None:
            self.remote = "remote" in self.location.lower()
        return self

    def to_posting(self) -> JobPosting:
        return JobPosting.model_validate(self.model_dump(exclude={"salary_text"}))


class JobOut(BaseModel):
    """Single field-name boundary for clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    company: str
    location: str
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[str] = None
    apply_link: str
    description: Optional[str] = None
    remote: bool
    posted_at: datetime

    @computed_field
    @property
    def salary(self) -> str:
        return format_salary(self.salary_min, self.salary_max)

    @field_validator("posted_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; everything is stored as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ---------- QUERY DESCRIPTOR ----------

class SortField(str, Enum):
    POSTED_AT = "posted_at"
    TITLE = "title"
    SALARY = "salary"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class QueryDescriptor(BaseModel):
    """Validated fetch_jobs request. Built per request, never persisted."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(min_length=1)
    location: Optional[str] = None
    remote_only: bool = False
    min_salary: Optional[float] = Field(default=None, ge=0)
    max_salary: Optional[float] = Field(default=None, ge=0)
    date_posted: Optional[date] = None
    max_pages: int = Field(default=1, ge=1)
    sort_by: SortField = SortField.POSTED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: Optional[int] = Field(default=None, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)

    @property
    def upstream_query(self) -> str:
        if self.location:
            return f"{self.query} in {self.location}"
        return self.query

    @property
    def paginated(self) -> bool:
        return self.limit is not None
