"""HTTP client for the runner / target REST API."""

from __future__ import annotations

import logging
from typing import Any, List

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import (
    API_BASE_URL,
    HTTP_MAX_RETRIES,
    HTTP_POOL_CONNECTIONS,
    HTTP_POOL_MAXSIZE,
    REQUEST_TIMEOUT,
)
from .errors import DataFetchError, NotFoundError
from .models import Runner, TargetAchievement
from .normalization import normalize_runners, normalize_target, normalize_targets

LOGGER = logging.getLogger(__name__)


def _build_retry() -> Retry:
    return Retry(
        total=HTTP_MAX_RETRIES,
        backoff_factor=1.0,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET"],
    )


def create_default_session() -> Session:
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=HTTP_POOL_CONNECTIONS,
        pool_maxsize=HTTP_POOL_MAXSIZE,
        max_retries=_build_retry(),
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


def _data_payload(response: requests.Response, url: str) -> Any:
    try:
        body = response.json()
    except ValueError as exc:
        raise DataFetchError(f"Invalid JSON from {url}") from exc
    if not isinstance(body, dict) or "data" not in body:
        raise DataFetchError(f"Unexpected payload from {url}: missing 'data'")
    return body["data"]


class TrackerClient:
    """Thin wrapper over the REST surface.

    Every transport failure is reported as :class:`DataFetchError` so callers
    can fall back to an empty, degraded report.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        session: Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or create_default_session()
        self.timeout = timeout

    def _request(self, method: str, path: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        LOGGER.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise DataFetchError(f"{method} {url} failed: {exc}") from exc
        return response

    def _get_list(self, path: str) -> List[dict]:
        url = f"{self.base_url}{path}"
        response = self._request("GET", path)
        if response.status_code >= 400:
            raise DataFetchError(f"GET {url} returned HTTP {response.status_code}")
        data = _data_payload(response, url)
        if not isinstance(data, list):
            raise DataFetchError(f"Unexpected payload from {url}: 'data' is not a list")
        return data

    def fetch_runners(self) -> List[Runner]:
        return normalize_runners(self._get_list("/api/runners"))

    def fetch_targets(self) -> List[TargetAchievement]:
        return normalize_targets(self._get_list("/api/targets/14km"))

    def validate_target(self, target_id: str) -> TargetAchievement:
        path = f"/api/targets/14km/validate/{target_id}"
        response = self._request("POST", path)
        if response.status_code == 404:
            raise NotFoundError(target_id)
        if response.status_code >= 400:
            raise DataFetchError(
                f"POST {self.base_url}{path} returned HTTP {response.status_code}"
            )
        data = _data_payload(response, f"{self.base_url}{path}")
        if not isinstance(data, dict):
            raise DataFetchError(f"Unexpected validate payload for {target_id}")
        return normalize_target(data)


__all__ = ["TrackerClient", "create_default_session"]
