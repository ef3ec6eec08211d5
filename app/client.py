# =============================================================================
# Records API Client
# =============================================================================
#
# Synchronous httpx client for the /api/users endpoints, plus access to the
# caller's saved filter presets.
#
# USAGE:
#   from app.client import RecordsClient
#   from app.services.presets import JsonFileKeyValueStore, PresetBook
#
#   presets = PresetBook(JsonFileKeyValueStore("data/presets.json"))
#   with RecordsClient("http://localhost:8000", presets=presets) as client:
#       spec = QuerySpec(term="ana", status="Active")
#       page = client.search_records(spec)
#       client.presets.save("active anas", spec)
#       csv_bytes = client.export_csv(client.presets.apply("active anas"))
#
# Error responses raise ApiError carrying the server's `kind` and `message`.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from app.config import settings
from app.services.presets import JsonFileKeyValueStore, PresetBook
from app.services.query_engine import QuerySpec

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, kind: str, message: str, status_code: int) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(f"{status_code} {kind}: {message}")


class RecordsClient:
    def __init__(
        self,
        base_url: str,
        presets: PresetBook | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=base_url, timeout=timeout, transport=transport,
        )
        self.presets = presets or PresetBook(
            JsonFileKeyValueStore(settings.preset_store_path),
            key=settings.preset_key,
        )

    def __enter__(self) -> RecordsClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_records(
        self,
        page: int = 1,
        limit: int = 10,
        sort_field: str = "createdAt",
        sort_order: str = "desc",
    ) -> dict:
        return self._request("GET", "/api/users", params={
            "page": page,
            "limit": limit,
            "sortField": sort_field,
            "sortOrder": sort_order,
        }).json()

    def search_records(self, spec: QuerySpec) -> dict:
        return self._request(
            "GET", "/api/users/search", params=_query_params(spec),
        ).json()

    def export_csv(self, spec: QuerySpec) -> bytes:
        params = _query_params(spec)
        params.pop("page")
        params.pop("limit")
        return self._request("GET", "/api/users/export", params=params).content

    def apply_preset(self, name: str, page: int = 1) -> dict:
        spec = self.presets.apply(name)
        return self.search_records(spec.model_copy(update={"page": page}))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def bulk_delete(self, ids: Iterable[int]) -> int:
        body = self._request(
            "POST", "/api/users/bulk-delete", json={"ids": list(ids)},
        ).json()
        return body["deleted_count"]

    def get_record(self, record_id: int) -> dict:
        return self._request("GET", f"/api/users/{record_id}").json()["data"]

    def create_record(self, data: dict[str, Any]) -> dict:
        return self._request("POST", "/api/users", json=data).json()["data"]

    def update_record(self, record_id: int, data: dict[str, Any]) -> dict:
        return self._request(
            "PUT", f"/api/users/{record_id}", json=data,
        ).json()["data"]

    def delete_record(self, record_id: int) -> None:
        self._request("DELETE", f"/api/users/{record_id}")

    # ------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = self._http.request(method, url, **kwargs)
        if response.is_success:
            return response

        try:
            body = response.json()
        except ValueError:
            body = {}
        kind = body.get("kind", "http_error")
        message = body.get("message") or response.reason_phrase
        logger.debug("%s %s failed: %d %s", method, url, response.status_code, kind)
        raise ApiError(kind, message, response.status_code)


def _query_params(spec: QuerySpec) -> dict[str, Any]:
    return {
        "query": spec.term,
        "status": spec.status,
        "gender": spec.gender,
        "sortField": spec.sort_field,
        "sortOrder": spec.sort_order,
        "page": spec.page,
        "limit": spec.limit,
    }
