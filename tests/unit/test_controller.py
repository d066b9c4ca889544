"""
Unit tests for the session/role controller.

The controller is driven headless against the in-memory backend.
Async calls run through asyncio.run so no plugin is needed.
"""

import asyncio
from dataclasses import replace

import pytest

from src.core.clients.models import ClientDraft, Role, Session
from src.core.clients.service import BackendNotConfiguredError
from src.core.portal.controller import ClientMutationError, PortalController, ViewKind
from src.core.portal.registry import Visitor, VisitorRegistry
from src.core.intake.wizard import IntakeWizard
from src.core.landing.gesture import LogoGesture
from src.core.landing.signin import SignInForm
from src.infrastructure.supabase.client import MockDataService
from src.infrastructure.supabase.demo import create_demo_service

COACH_EMAIL = "coach@rippedcity.test"
CLIENT_EMAIL = "client@example.com"


def run(coro):
    return asyncio.run(coro)


def started(service, coach_email: str = COACH_EMAIL) -> PortalController:
    controller = PortalController(service=service, coach_email=coach_email)
    run(controller.initialize())
    return controller


def sign_in(controller: PortalController, service: MockDataService, email: str, password: str):
    run(service.sign_in_with_password(email, password))
    return run(controller.current_view())


# ---------------------------------------------------------------------------
# View Routing Tests
# ---------------------------------------------------------------------------

class TestViewRouting:
    """Tests for the first-match-wins view selection."""

    def test_unconfigured_backend_shows_config_error(self):
        controller = PortalController(service=None, coach_email=COACH_EMAIL)
        run(controller.initialize())

        assert controller.view().kind is ViewKind.CONFIG_ERROR

    def test_loading_until_initial_session_fetch_resolves(self, service):
        controller = PortalController(service=service, coach_email=COACH_EMAIL)

        assert controller.view().kind is ViewKind.LOADING

        run(controller.initialize())

        assert controller.view().kind is ViewKind.LANDING

    def test_restored_session_is_used_at_startup(self, service):
        """A session persisted by the backend skips the landing page."""
        run(service.sign_in_with_password(COACH_EMAIL, "coach-pass"))

        controller = started(service)

        assert controller.view().kind is ViewKind.DASHBOARD

    def test_coach_gets_dashboard_with_all_clients_newest_first(self, service, backend, client_row):
        """Given T1 > T2 > T3, the dashboard lists [T1, T2, T3]."""
        backend.seed("clients", [
            client_row("t2", "2024-02-01T00:00:00+00:00", "b@example.com"),
            client_row("t3", "2024-01-01T00:00:00+00:00", "c@example.com"),
            client_row("t1", "2024-03-01T00:00:00+00:00", "a@example.com"),
        ])
        controller = started(service)

        view = sign_in(controller, service, COACH_EMAIL, "coach-pass")

        assert view.kind is ViewKind.DASHBOARD
        assert [c.id for c in view.clients] == ["t1", "t2", "t3"]
        assert controller.role is Role.COACH

    def test_client_gets_their_own_record_only(self, service, backend, client_row):
        backend.seed("clients", [
            client_row("mine", "2024-01-01T00:00:00+00:00", CLIENT_EMAIL),
            client_row("other", "2024-02-01T00:00:00+00:00", "other@example.com"),
        ])
        controller = started(service)

        view = sign_in(controller, service, CLIENT_EMAIL, "client-pass")

        assert view.kind is ViewKind.PORTAL
        assert view.client.id == "mine"
        assert [c.id for c in controller.clients] == ["mine"]

    def test_client_without_record_gets_pending_fallback(self, service, backend, client_row):
        """No matching record is not an error; the portal is never shown."""
        backend.seed("clients", [client_row("other", "2024-02-01T00:00:00+00:00", "other@example.com")])
        controller = started(service)

        view = sign_in(controller, service, CLIENT_EMAIL, "client-pass")

        assert view.kind is ViewKind.PORTAL_PENDING
        assert view.client is None
        assert controller.clients == []

    def test_sign_out_notification_returns_to_landing_and_clears_records(self, service, backend, client_row):
        backend.seed("clients", [client_row("x", "2024-01-01T00:00:00+00:00", "a@example.com")])
        controller = started(service)
        sign_in(controller, service, COACH_EMAIL, "coach-pass")

        run(controller.logout())
        view = run(controller.current_view())

        assert view.kind is ViewKind.LANDING
        assert controller.clients == []

    def test_unreadable_row_is_skipped_and_the_rest_load(self, service, backend, client_row):
        """One broken record must not empty the whole dashboard."""
        broken = client_row("broken", "2024-04-01T00:00:00+00:00", "d@example.com")
        broken["status"] = None
        backend.seed("clients", [
            client_row("t1", "2024-03-01T00:00:00+00:00", "a@example.com"),
            broken,
            client_row("t2", "2024-02-01T00:00:00+00:00", "b@example.com"),
            client_row("t3", "2024-01-01T00:00:00+00:00", "c@example.com"),
        ])
        controller = started(service)

        view = sign_in(controller, service, COACH_EMAIL, "coach-pass")

        assert view.kind is ViewKind.DASHBOARD
        assert [c.id for c in view.clients] == ["t1", "t2", "t3"]

    def test_fetch_errors_degrade_to_empty_list(self, service, backend, client_row):
        backend.seed("clients", [client_row("x", "2024-01-01T00:00:00+00:00", "a@example.com")])
        service.failures["query"] = "connection reset"
        controller = started(service)

        view = sign_in(controller, service, COACH_EMAIL, "coach-pass")

        assert view.kind is ViewKind.DASHBOARD
        assert view.clients == []


# ---------------------------------------------------------------------------
# Session Ordering Tests
# ---------------------------------------------------------------------------

class NotifyDuringFetchService(MockDataService):
    """Delivers a notification while the initial session fetch is in flight."""

    def __init__(self, backend, notified: Session, fetched: Session) -> None:
        super().__init__(backend)
        self._notified = notified
        self._fetched = fetched

    async def get_current_session(self):
        self._set_session("TOKEN_REFRESHED", self._notified)
        return self._fetched


class SignOutDuringQueryService(MockDataService):
    """The session goes away while the client list is being fetched."""

    async def query(self, table, filters=None, order_by=None, limit=None):
        rows = await super().query(table, filters, order_by, limit)
        self._set_session("SIGNED_OUT", None)
        return rows


class SilentSignOutService(MockDataService):
    """Signs out without sending a notification."""

    async def sign_out(self) -> None:
        self._session = None


class TestSessionOrdering:
    """The latest session to arrive wins, whatever the source."""

    def test_initial_fetch_landing_after_notification_wins(self, backend):
        service = NotifyDuringFetchService(
            backend,
            notified=Session(user_id="n", email=CLIENT_EMAIL),
            fetched=Session(user_id="f", email=COACH_EMAIL),
        )

        controller = started(service)

        assert controller.session.user_id == "f"
        assert controller.role is Role.COACH

    def test_notification_after_initial_fetch_wins(self, service):
        controller = started(service)

        run(service.sign_in_with_password(CLIENT_EMAIL, "client-pass"))

        assert controller.session.email == CLIENT_EMAIL
        assert controller.role is Role.CLIENT

    def test_fetch_for_a_replaced_session_is_discarded(self, backend, client_row):
        backend.seed("clients", [client_row("x", "2024-01-01T00:00:00+00:00", "a@example.com")])
        service = SignOutDuringQueryService(backend)
        run(service.sign_in_with_password(COACH_EMAIL, "coach-pass"))

        controller = started(service)

        assert controller.session is None
        assert controller.clients == []
        assert run(controller.current_view()).kind is ViewKind.LANDING

    def test_logout_waits_for_notification(self, backend):
        """Logout asks the backend; local state only changes via the subscription."""
        service = SilentSignOutService(backend)
        controller = started(service)
        run(service.sign_in_with_password(COACH_EMAIL, "coach-pass"))

        run(controller.logout())

        assert controller.session is not None

    def test_close_releases_subscription(self, service):
        controller = started(service)
        assert service.listener_count == 1

        controller.close()

        assert service.listener_count == 0

    def test_notifications_after_close_are_ignored(self, service):
        controller = started(service)
        # Keep a listener registered by a second controller so the event fires
        other = started(service)
        controller.close()

        run(service.sign_in_with_password(COACH_EMAIL, "coach-pass"))

        assert controller.session is None
        assert other.session is not None


# ---------------------------------------------------------------------------
# Mutation Tests
# ---------------------------------------------------------------------------

class TestMutations:
    """Tests for add/update callbacks."""

    @pytest.fixture
    def coach(self, service, backend, client_row) -> PortalController:
        backend.seed("clients", [client_row("X", "2024-01-01T00:00:00+00:00", "x@example.com", goal="Bulk")])
        controller = started(service)
        sign_in(controller, service, COACH_EMAIL, "coach-pass")
        return controller

    def test_add_client_prepends_stored_record(self, coach):
        draft = ClientDraft(name="New Person", email="new@example.com")

        added = run(coach.add_client(draft))

        assert added.id
        assert added.created_at
        assert [c.id for c in coach.clients] == [added.id, "X"]

    def test_add_failure_alerts_and_leaves_list_unchanged(self, coach, service):
        service.failures["insert"] = 'duplicate key value violates unique constraint "clients_email_key"'
        before = coach.clients

        with pytest.raises(ClientMutationError, match="duplicate key value") as excinfo:
            run(coach.add_client(ClientDraft(name="Dup", email="x@example.com")))

        assert str(excinfo.value).startswith("Error: ")
        assert coach.clients == before

    def test_update_replaces_record_in_place_keeping_created_at(self, coach):
        client = replace(coach.clients[0], goal="Cut for the show")

        run(coach.update_client(client))

        matching = [c for c in coach.clients if c.id == "X"]
        assert len(matching) == 1
        assert matching[0].goal == "Cut for the show"
        assert matching[0].created_at == "2024-01-01T00:00:00+00:00"

    def test_update_sends_no_identity_fields(self, coach, backend):
        client = replace(coach.clients[0], name="Renamed")

        run(coach.update_client(client))

        stored = backend.tables["clients"][0]
        assert stored["id"] == "X"
        assert stored["name"] == "Renamed"

    def test_update_failure_raises_and_leaves_list_unchanged(self, coach, service):
        service.failures["update"] = "permission denied for table clients"
        client = replace(coach.clients[0], goal="Changed")

        with pytest.raises(ClientMutationError, match="permission denied"):
            run(coach.update_client(client))

        assert coach.clients[0].goal == "Bulk"

    def test_mutations_need_a_backend(self):
        controller = PortalController(service=None, coach_email=COACH_EMAIL)
        run(controller.initialize())

        with pytest.raises(BackendNotConfiguredError):
            run(controller.add_client(ClientDraft(name="A", email="a@example.com")))


# ---------------------------------------------------------------------------
# Demo Access Tests
# ---------------------------------------------------------------------------

class TestDemoAccess:

    def test_demo_enters_dashboard_with_sample_clients(self, service):
        controller = started(service)

        run(controller.enter_demo(create_demo_service()))
        view = controller.view()

        assert view.kind is ViewKind.DASHBOARD
        assert view.session.is_demo
        assert [c.id for c in view.clients] == ["demo-1", "demo-2", "demo-3"]

    def test_demo_works_without_configured_backend(self):
        controller = PortalController(service=None, coach_email=COACH_EMAIL)
        run(controller.initialize())

        run(controller.enter_demo(create_demo_service()))

        assert controller.view().kind is ViewKind.DASHBOARD

    def test_leaving_demo_restores_real_backend(self, service):
        controller = started(service)
        run(controller.enter_demo(create_demo_service()))
        assert service.listener_count == 0

        run(controller.logout())

        assert controller.view().kind is ViewKind.LANDING
        assert controller.service is service
        assert service.listener_count == 1

    def test_leaving_demo_restores_existing_sign_in(self, service, backend, client_row):
        """A coach who opened the demo is still signed in afterwards."""
        backend.seed("clients", [client_row("real", "2024-01-01T00:00:00+00:00", "a@example.com")])
        controller = started(service)
        sign_in(controller, service, COACH_EMAIL, "coach-pass")
        run(controller.enter_demo(create_demo_service()))

        run(controller.logout())
        view = controller.view()

        assert view.kind is ViewKind.DASHBOARD
        assert not view.session.is_demo
        assert view.session.email == COACH_EMAIL
        assert [c.id for c in view.clients] == ["real"]


# ---------------------------------------------------------------------------
# Visitor Registry Tests
# ---------------------------------------------------------------------------

class TestVisitorRegistry:

    @pytest.fixture
    def make_registry(self, service):
        def factory() -> Visitor:
            return Visitor(
                controller=PortalController(service=service, coach_email=COACH_EMAIL),
                wizard=IntakeWizard(),
                sign_in=SignInForm(),
                logo=LogoGesture(),
            )

        def make(max_visitors: int = 10) -> VisitorRegistry:
            return VisitorRegistry(factory, max_visitors=max_visitors)

        return make

    def test_new_visitor_is_initialized(self, make_registry):
        registry = make_registry()

        visitor_id, visitor = run(registry.get(None))

        assert visitor_id
        assert not visitor.controller.is_loading

    def test_known_id_returns_same_visitor(self, make_registry):
        registry = make_registry()
        visitor_id, visitor = run(registry.get(None))

        again_id, again = run(registry.get(visitor_id))

        assert again_id == visitor_id
        assert again is visitor

    def test_unknown_id_is_not_adopted(self, make_registry):
        registry = make_registry()

        visitor_id, _ = run(registry.get("made-up"))

        assert visitor_id != "made-up"

    def test_oldest_visitor_is_evicted_and_closed(self, make_registry, service):
        registry = make_registry(max_visitors=1)
        first_id, _ = run(registry.get(None))

        run(registry.get(None))

        assert first_id not in registry
        assert len(registry) == 1
        assert service.listener_count == 1
