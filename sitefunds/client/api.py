from __future__ import annotations

import logging
from typing import Any, Final

import httpx

from sitefunds.client.cache import QueryCache
from sitefunds.observability import incr_metric, log_event


# (method, path prefix) -> cached path prefixes a successful mutation makes stale.
INVALIDATION_RULES: Final[dict[tuple[str, str], tuple[str, ...]]] = {
    ("POST", "/api/projects"): ("/api/projects", "/api/analytics", "/api/audit-logs"),
    ("PUT", "/api/projects"): ("/api/projects", "/api/analytics", "/api/audit-logs"),
    ("DELETE", "/api/projects"): ("/api/projects", "/api/analytics", "/api/audit-logs"),
    ("POST", "/api/fund-allocations"): (
        "/api/fund-allocations",
        "/api/transactions",
        "/api/projects",
        "/api/analytics",
        "/api/audit-logs",
    ),
    ("POST", "/api/transactions"): ("/api/transactions", "/api/analytics", "/api/audit-logs"),
    ("POST", "/api/fund-transfers"): ("/api/fund-transfers", "/api/audit-logs"),
    ("PATCH", "/api/users"): ("/api/users", "/api/audit-logs"),
    ("POST", "/api/users"): ("/api/users", "/api/audit-logs"),
    ("POST", "/api/companies"): ("/api/companies",),
    ("PUT", "/api/companies"): ("/api/companies",),
    ("POST", "/api/auth/change-password"): ("/api/auth/user",),
}


class ApiError(Exception):
    """Raised for transport failures and non-2xx responses from the REST API."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_forbidden(self) -> bool:
        return self.status_code == 403


def invalidation_targets(method: str, path: str) -> tuple[str, ...] | None:
    """Declared invalidation for a mutation, matched on the longest path prefix."""
    method = method.upper()
    best: tuple[str, ...] | None = None
    best_len = -1
    for (rule_method, prefix), targets in INVALIDATION_RULES.items():
        if rule_method != method:
            continue
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            if len(prefix) > best_len:
                best, best_len = targets, len(prefix)
    return best


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if detail:
            return str(detail)
    return f"HTTP {response.status_code}"


class ApiClient:
    """Thin client over the REST API with a shared query cache.

    Requests are never retried; callers decide what a failure means.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float = 10.0,
        cache: QueryCache | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds
        self.cache = cache or QueryCache()
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, json_payload: dict[str, Any] | None = None) -> Any:
        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = client.request(method, path, headers=self._headers(), json=json_payload)
        except httpx.HTTPError as exc:
            incr_metric("client_request_failed", method=method, reason="connectivity")
            raise ApiError(f"Connectivity error calling {method} {path}: {exc}") from exc

        if response.status_code >= 400:
            incr_metric("client_request_failed", method=method, status_code=response.status_code)
            raise ApiError(_error_detail(response), status_code=response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def query(self, path: str, *, stale_seconds: float | None = None, force: bool = False) -> Any:
        if not force:
            entry = self.cache.get(path, stale_seconds=stale_seconds)
            if entry is not None:
                return entry.data
        data = self._request("GET", path)
        self.cache.set(path, data)
        return data

    def mutate(self, method: str, path: str, json_payload: dict[str, Any] | None = None) -> Any:
        data = self._request(method.upper(), path, json_payload)
        targets = invalidation_targets(method, path)
        if targets is None:
            log_event(
                "client_mutation_without_rule",
                level=logging.WARNING,
                method=method.upper(),
                path=path,
            )
            self.cache.clear()
        else:
            self.cache.invalidate(targets)
        return data

    def login(self, email: str, password: str) -> dict[str, Any]:
        self.token = None
        data = self._request("POST", "/api/auth/login", {"email": email, "password": password})
        self.token = data["access_token"]
        self.cache.clear()
        return data

    def logout(self) -> None:
        self.token = None
        self.cache.clear()
