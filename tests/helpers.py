"""Shared test doubles and sample data."""

from datetime import datetime, timezone

from app.models.jobs import JobPosting

API_KEY = "test-key"


class FakeJSearchClient:
    """Stands in for JSearchClient; returns canned upstream records."""

    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.calls = []

    def search(self, *, query, num_pages=1):
        self.calls.append({"query": query, "num_pages": num_pages})
        if self.error:
            raise self.error
        return list(self.records)


def upstream_record(**overrides):
    record = {
        "job_title": "Software Engineer",
        "employer_name": "Tech Corp",
        "job_city": "San Francisco",
        "job_country": "US",
        "job_min_salary": 100000,
        "job_max_salary": 150000,
        "job_apply_link": "https://example.com/apply",
        "job_description": "Great opportunity",
        "job_posted_at_timestamp": 1672531200,  # 2023-01-01T00:00:00Z
    }
    record.update(overrides)
    return record


def posting(title, location="Remote", salary=(None, None), posted=(2023, 1, 1), company="Acme", link=None):
    return JobPosting(
        title=title,
        company=company,
        location=location,
        salary_min=salary[0],
        salary_max=salary[1],
        apply_link=link or f"https://example.com/{title.lower().replace(' ', '-')}",
        remote="remote" in location.lower(),
        posted_at=datetime(*posted, tzinfo=timezone.utc),
    )


SAMPLE_POSTINGS = [
    posting("Junior Developer", "Remote", (60000, 80000), (2023, 1, 1), "StartUp Co"),
    posting("Senior Developer", "San Francisco", (150000, 200000), (2023, 1, 15), "Tech Giant"),
    posting("Full Stack Developer", "New York", (100000, 130000), (2023, 1, 10), "Mid Corp"),
]


