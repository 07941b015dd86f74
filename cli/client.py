from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.schemas import TrafficRecord
from cli.config import CLIConfig
from models.errors import ServerError, TrafficError, error_for_status


class ApiClient:
    """Minimal HTTP client for the traffic API.

    Every failure is raised as a ``TrafficError`` subclass chosen from the
    response status; transport failures become ``ServerError``.
    """

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        headers = {"Content-Type": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout, headers=headers)

    def close(self) -> None:
        self._client.close()

    def list_records(self) -> List[TrafficRecord]:
        payload = self._request("GET", "/traffic")
        items = payload.get("data") or []
        if not isinstance(items, list):
            raise self._malformed("GET", "/traffic")
        return [self._parse_record(item, "GET") for item in items]

    def create_record(self, date: str, visits: int) -> TrafficRecord:
        payload = self._request("POST", "/traffic", json={"date": date, "visits": visits})
        return self._parse_record(payload.get("data"), "POST")

    def update_record(
        self,
        record_id: str,
        date: Optional[str] = None,
        visits: Optional[int] = None,
    ) -> TrafficRecord:
        body: Dict[str, Any] = {}
        if date is not None:
            body["date"] = date
        if visits is not None:
            body["visits"] = visits
        payload = self._request("PUT", "/traffic", params={"id": record_id}, json=body)
        return self._parse_record(payload.get("data"), "PUT")

    def delete_record(self, record_id: str) -> None:
        self._request("DELETE", "/traffic", params={"id": record_id})

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ServerError(f"Could not reach {self._config.base_url}: {exc}") from exc

        if not response.is_success:
            raise self._error_from_response(response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise self._malformed(method, url) from exc
        if not isinstance(payload, dict):
            raise self._malformed(method, url)
        return payload

    def _parse_record(self, item: Any, method: str) -> TrafficRecord:
        try:
            return TrafficRecord.model_validate(item)
        except PydanticValidationError as exc:
            raise self._malformed(method, "/traffic") from exc

    def _malformed(self, method: str, url: str) -> ServerError:
        return ServerError(f"Malformed response from {method} {self._config.base_url}{url}")

    @staticmethod
    def _error_from_response(response: httpx.Response) -> TrafficError:
        detail: str | None = None
        try:
            data = response.json()
            if isinstance(data, dict):
                detail = data.get("error") or data.get("detail")
        except ValueError:
            detail = response.text.strip() or None
        if detail is None:
            detail = f"HTTP {response.status_code}: {response.reason_phrase}"
        return error_for_status(response.status_code, str(detail))
