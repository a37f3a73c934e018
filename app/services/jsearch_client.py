from typing import Any, Dict, List

import requests

from app.config import Settings
from app.errors import MalformedUpstreamResponse, NetworkError, UpstreamError
from app.logger import get_logger

logger = get_logger(__name__)


def _mask(key: str) -> str:
    return "***" + key[-4:] if key else "not set"


def _error_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class JSearchClient:
    """
    Thin client for the JSearch 'Job Search' endpoint on RapidAPI.
    One instance per app; requests.Session keeps connections pooled.
    """

    def __init__(self, settings: Settings, session: requests.Session = None):
        self.url = settings.jsearch_api_url
        self.host = settings.jsearch_api_host
        self.api_key = settings.jsearch_api_key
        self.timeout = settings.jsearch_timeout
        self.session = session or requests.Session()

    def search(self, *, query: str, num_pages: int = 1) -> List[Dict[str, Any]]:
        """
        Returns the raw ``data`` records of one search call.

        Raises UpstreamError (non-2xx answer), NetworkError (no answer) or
        MalformedUpstreamResponse (answer without a ``data`` list).
        """
        params = {
            "query": query,
            "page": "1",
            "num_pages": str(num_pages),
        }
        headers = {
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": self.host,
        }
        logger.info(
            f"[UPSTREAM] GET {self.url} params={params} key={_mask(self.api_key)}"
        )

        try:
            resp = self.session.get(self.url, params=params, headers=headers, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.error(f"[UPSTREAM] Timed out after {self.timeout}s: {exc}")
            raise NetworkError(
                "Network error while fetching jobs",
                f"Upstream request timed out after {self.timeout:g}s",
            ) from exc
        except requests.RequestException as exc:
            logger.error(f"[UPSTREAM] No response: {exc}")
            raise NetworkError(
                "Network error while fetching jobs",
                "Please check your internet connection",
            ) from exc

        if not resp.ok:
            logger.warning(f"[UPSTREAM] Status {resp.status_code} for query={query!r}")
            raise UpstreamError(
                "Failed to fetch jobs from external API",
                status_code=resp.status_code,
                details=_error_body(resp),
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse(
                "Internal server error",
                "Invalid response format from JSearch API",
            ) from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise MalformedUpstreamResponse(
                "Internal server error",
                "Invalid response format from JSearch API",
            )

        logger.info(f"[UPSTREAM] Received {len(payload['data'])} records")
        return payload["data"]
