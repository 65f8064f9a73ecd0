import pytest

from core.errors import AuthError, AuthorizationError
from services.auth.gate import AdminSessionGate, GateState, SessionEvent
from services.auth.identity import PasswordIdentityProvider, hash_password, seed_admin
from services.review.applications import ApplicationReviewService
from services.review.dashboard import DashboardController

SECRET = "test-secret"


class SpyReview(ApplicationReviewService):
    def __init__(self, records) -> None:
        super().__init__(records)
        self.list_calls = 0

    def list_applications(self):
        self.list_calls += 1
        return super().list_applications()


@pytest.fixture
def provider(records) -> PasswordIdentityProvider:
    p = PasswordIdentityProvider(records, SECRET, expire_minutes=30)
    p.create_user("admin@x.com", "s3cret!", role="admin")
    p.create_user("clerk@x.com", "s3cret!", role="viewer")
    p.create_user("norole@x.com", "s3cret!")
    return p


def _pending(records, n: int) -> list[str]:
    rows = [{"full_name": f"A{i}", "email": f"a{i}@x.com", "status": "pending"} for i in range(n)]
    return [r["id"] for r in records.insert("applications", rows)]


def test_bad_credentials_raise_auth_error(provider) -> None:
    gate = AdminSessionGate(provider)
    with pytest.raises(AuthError):
        gate.sign_in("admin@x.com", "wrong")
    with pytest.raises(AuthError):
        gate.sign_in("ghost@x.com", "s3cret!")
    assert gate.evaluate() is GateState.SIGNED_OUT


def test_gate_states_follow_role(provider) -> None:
    gate = AdminSessionGate(provider)
    gate.sign_in("Admin@X.com", "s3cret!")
    assert gate.evaluate() is GateState.ADMIN
    assert gate.require_admin().email == "admin@x.com"

    gate.sign_in("clerk@x.com", "s3cret!")
    assert gate.evaluate() is GateState.UNAUTHORIZED
    with pytest.raises(AuthorizationError):
        gate.require_admin()

    gate.sign_in("norole@x.com", "s3cret!")
    assert gate.evaluate() is GateState.UNAUTHORIZED

    gate.sign_out()
    with pytest.raises(AuthError):
        gate.require_admin()


def test_listeners_see_sign_in_and_out_until_unsubscribed(provider) -> None:
    gate = AdminSessionGate(provider)
    seen = []
    unsubscribe = gate.subscribe(lambda event, session: seen.append(event))

    gate.sign_in("admin@x.com", "s3cret!")
    gate.sign_out()
    unsubscribe()
    gate.sign_in("admin@x.com", "s3cret!")

    assert seen == [SessionEvent.SIGNED_IN, SessionEvent.SIGNED_OUT]


def test_expired_session_is_detected_on_refresh(records) -> None:
    provider = PasswordIdentityProvider(records, SECRET, expire_minutes=-1)
    provider.create_user("admin@x.com", "s3cret!", role="admin")
    gate = AdminSessionGate(provider)
    seen = []
    gate.subscribe(lambda event, session: seen.append((event, session)))

    gate.sign_in("admin@x.com", "s3cret!")
    assert gate.refresh() is None
    assert gate.evaluate() is GateState.SIGNED_OUT
    assert seen[-1] == (SessionEvent.EXPIRED, None)


def test_tampered_token_has_no_session(provider) -> None:
    session = provider.sign_in("admin@x.com", "s3cret!")
    assert provider.get_session(session.access_token) is not None
    assert provider.get_session(session.access_token + "x") is None
    assert provider.get_session(None) is None


def test_seed_admin_is_idempotent(records) -> None:
    provider = PasswordIdentityProvider(records, SECRET)
    hashed = hash_password("boot")
    assert seed_admin(provider, "boss@x.com", hashed) is True
    assert seed_admin(provider, "boss@x.com", hashed) is False
    assert seed_admin(provider, None, hashed) is False
    assert AdminSessionGate(provider).sign_in("boss@x.com", "boot").identity.email == "boss@x.com"


def test_non_admin_dashboard_fetches_nothing(provider, records) -> None:
    _pending(records, 2)
    review = SpyReview(records)
    dashboard = DashboardController(AdminSessionGate(provider), review)
    dashboard.open()

    state = dashboard.sign_in("clerk@x.com", "s3cret!")

    assert state.gate is GateState.UNAUTHORIZED
    assert state.applications == []
    assert review.list_calls == 0


def test_dashboard_reacts_to_session_changes(provider, records) -> None:
    _pending(records, 2)
    gate = AdminSessionGate(provider)
    dashboard = DashboardController(gate, ApplicationReviewService(records))
    assert dashboard.open().gate is GateState.SIGNED_OUT

    gate.sign_in("admin@x.com", "s3cret!")
    assert dashboard.state.gate is GateState.ADMIN
    assert len(dashboard.state.applications) == 2

    gate.sign_out()
    assert dashboard.state.gate is GateState.SIGNED_OUT
    assert dashboard.state.applications == []

    dashboard.close()
    gate.sign_in("admin@x.com", "s3cret!")
    assert dashboard.state.gate is GateState.SIGNED_OUT


def test_bulk_delete_of_two_pending_clears_selection(provider, records) -> None:
    ids = _pending(records, 3)
    dashboard = DashboardController(AdminSessionGate(provider), ApplicationReviewService(records))
    dashboard.open()
    dashboard.sign_in("admin@x.com", "s3cret!")

    dashboard.toggle(ids[0])
    dashboard.toggle(ids[1])
    feedback = dashboard.delete_selected(confirmed=True)

    assert feedback.ok
    assert dashboard.state.selected == set()
    assert [a.id for a in dashboard.state.applications] == [ids[2]]
    assert [r["id"] for r in records.select("applications")] == [ids[2]]


def test_unconfirmed_bulk_delete_keeps_rows_and_selection(provider, records) -> None:
    ids = _pending(records, 2)
    dashboard = DashboardController(AdminSessionGate(provider), ApplicationReviewService(records))
    dashboard.open()
    dashboard.sign_in("admin@x.com", "s3cret!")
    dashboard.select(ids)

    feedback = dashboard.delete_selected(confirmed=False)

    assert not feedback.ok
    assert dashboard.state.selected == set(ids)
    assert len(records.select("applications")) == 2


def test_dashboard_status_changes_and_inline_failure(provider, records) -> None:
    (app_id,) = _pending(records, 1)
    dashboard = DashboardController(AdminSessionGate(provider), ApplicationReviewService(records))
    dashboard.open()
    dashboard.sign_in("admin@x.com", "s3cret!")

    assert dashboard.change_status(app_id, "processing").ok
    assert dashboard.change_status(app_id, "completed").ok
    assert dashboard.state.applications[0].status.value == "completed"

    failed = dashboard.change_status(app_id, "pending")
    assert not failed.ok
    assert failed.application_id == app_id
    assert records.select("applications")[0]["status"] == "completed"
