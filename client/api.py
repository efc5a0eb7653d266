"""HTTP wrapper around the criteria endpoints.

Every call either returns decoded JSON of the expected shape or raises
``ApiError``. A success reply with a malformed body counts as a failure.
"""
import logging
import os

import httpx
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = os.getenv("API_URL", "http://localhost:8000")
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server."


class ApiError(Exception):
    """Raised for network failures (no status code), non-2xx responses and
    success responses whose body is not the expected JSON shape.
    """

    def __init__(self, message: str | None, status_code: int | None = None):
        super().__init__(message or "request failed")
        self.message = message
        self.status_code = status_code

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error") or body.get("message")
    return None


class CriteriaApi:
    def __init__(self, http: httpx.Client | None = None, base_url: str = DEFAULT_API_URL):
        self.http = http or httpx.Client(base_url=base_url)

    def _request(self, method: str, url: str, expected: type | None = dict, **kwargs):
        try:
            response = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(str(exc) or None) from exc

        if response.is_error:
            message = _server_message(response)
            logger.warning("%s %s returned %s: %s", method, url, response.status_code, message)
            raise ApiError(message, response.status_code)

        if expected is None:
            return None

        try:
            body = response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, url)
            raise ApiError(UNEXPECTED_RESPONSE_MESSAGE, response.status_code) from exc

        if not isinstance(body, expected):
            logger.warning("%s %s returned %s, expected %s", method, url, type(body).__name__, expected.__name__)
            raise ApiError(UNEXPECTED_RESPONSE_MESSAGE, response.status_code)
        return body

    def list_criteria(self, event_id: int) -> list[dict]:
        return self._request("GET", f"/api/event/criteria/{event_id}", expected=list)

    def create_criteria(self, event_id: int, criteria_name: str, max_score: int) -> dict:
        return self._request(
            "POST",
            f"/api/event/criteria/{event_id}",
            json={"criteria_name": criteria_name, "max_score": max_score},
        )

    def update_criteria(self, record: dict) -> dict:
        return self._request(
            "PUT",
            f"/api/event/criteria/update/{record['criteria_id']}",
            json=record,
        )

    def delete_criteria(self, criteria_id: int) -> None:
        self._request("DELETE", f"/api/event/criteria/delete/{criteria_id}", expected=None)

    def close(self) -> None:
        self.http.close()
