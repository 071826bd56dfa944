import httpx

from sitefunds.client.api import ApiClient
from sitefunds.client.cache import QueryCache
from sitefunds.client.session import SessionAccessor


def _accessor(handler) -> tuple[SessionAccessor, list]:
    calls = []

    def _recording(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return handler(request)

    api = ApiClient(
        "https://api.sitefunds.example",
        token="tok",
        transport=httpx.MockTransport(_recording),
        cache=QueryCache(),
    )
    return SessionAccessor(api), calls


def test_session_starts_loading():
    accessor, calls = _accessor(lambda request: httpx.Response(200, json={}))
    assert accessor.is_loading is True
    assert accessor.is_authenticated is False
    assert calls == []


def test_authenticated_session_normalizes_legacy_role():
    accessor, _ = _accessor(lambda request: httpx.Response(200, json={"id": "u-1", "role": "manager"}))
    state = accessor.load()

    assert state.is_authenticated is True
    assert state.role == "admin"
    assert state.original_role == "manager"
    assert accessor.permissions.is_admin is True
    assert accessor.permissions.check("can_manage_fund_allocations") is True
    assert accessor.permissions.is_at_least("team_leader") is True


def test_unauthorized_session_is_unauthenticated_without_error():
    accessor, _ = _accessor(lambda request: httpx.Response(401, json={"detail": "Missing authorization header"}))
    state = accessor.load()

    assert state.is_loading is False
    assert state.is_authenticated is False
    assert state.error is None
    assert accessor.permissions.has_permission("VIEW_ANALYTICS") is False


def test_failed_session_fetch_fails_closed_and_is_not_retried():
    accessor, calls = _accessor(lambda request: httpx.Response(500, json={"detail": "boom"}))
    first = accessor.load()
    second = accessor.load()

    assert first is second
    assert first.is_authenticated is False
    assert first.error is not None and first.error.status_code == 500
    assert calls == ["/api/auth/user"]
    assert accessor.permissions.is_at_least("viewer") is False


def test_reset_starts_a_new_session():
    accessor, calls = _accessor(lambda request: httpx.Response(200, json={"id": "u-1", "role": "viewer"}))
    accessor.load()
    accessor.reset()

    assert accessor.is_loading is True
    accessor.load()
    assert calls == ["/api/auth/user", "/api/auth/user"]
    assert accessor.permissions.is_viewer is True
