"""
In-memory browser platform used by the client and worker unit tests.

The fakes implement the platform interfaces from alienfood.client.platform
and record every call so tests can assert on ordering and counts.
"""

import httpx
import pytest

from alienfood.client.keys import FALLBACK_VAPID_PUBLIC_KEY
from alienfood.client.platform import (
    NotificationCapability,
    PlatformSubscription,
    PushManager,
    ServiceWorkerContainer,
    ServiceWorkerRegistration,
)
from alienfood.models import PermissionState


# ─────────────────────────────────────────────────────────────────────────────
# Platform Fakes
# ─────────────────────────────────────────────────────────────────────────────


class FakeNotifications(NotificationCapability):
    def __init__(self, permission="default", prompt_result="granted"):
        self._permission = PermissionState(permission)
        self.prompt_result = PermissionState(prompt_result)
        self.prompt_calls = 0

    @property
    def permission(self):
        return self._permission

    async def request_permission(self):
        self.prompt_calls += 1
        self._permission = self.prompt_result
        return self.prompt_result


class FakeSubscription(PlatformSubscription):
    def __init__(self, push_manager, number):
        self._push_manager = push_manager
        self._endpoint = f"https://push.example.com/send/{number}"
        self._keys = {"p256dh": f"BPk-key-{number}", "auth": f"auth-{number}"}
        self.unsubscribed = False

    @property
    def endpoint(self):
        return self._endpoint

    @property
    def keys(self):
        return self._keys

    async def unsubscribe(self):
        manager = self._push_manager
        manager.unsubscribe_calls += 1
        if manager.unsubscribe_error is not None:
            raise manager.unsubscribe_error

        self.unsubscribed = True
        if manager.current is self:
            manager.current = None
        if manager.regenerate:
            manager.current = manager.new_subscription()
        return True


class FakePushManager(PushManager):
    """
    Holds at most one subscription, like the real PushManager.

    With ``regenerate`` set, every unsubscribe immediately produces a new
    subscription, which models a platform stuck on a corrupted state.
    """

    def __init__(self, regenerate=False):
        self.current = None
        self.regenerate = regenerate
        self.subscribe_calls = []
        self.unsubscribe_calls = 0
        self.unsubscribe_error = None
        self.get_error = None
        self._counter = 0

    def new_subscription(self):
        self._counter += 1
        return FakeSubscription(self, self._counter)

    async def get_subscription(self):
        if self.get_error is not None:
            raise self.get_error
        return self.current

    async def subscribe(self, *, user_visible_only, application_server_key):
        self.subscribe_calls.append({
            "user_visible_only": user_visible_only,
            "application_server_key": application_server_key,
        })
        if self.current is None:
            self.current = self.new_subscription()
        return self.current


class FakeRegistration(ServiceWorkerRegistration):
    def __init__(self, push_manager):
        self._push_manager = push_manager
        self.shown = []

    @property
    def push_manager(self):
        return self._push_manager

    async def show_notification(self, title, options):
        self.shown.append((title, options))


class FakeContainer(ServiceWorkerContainer):
    def __init__(self, registration, ready_error=None):
        self.registration = registration
        self.ready_error = ready_error
        self.ready_calls = 0

    async def ready(self):
        self.ready_calls += 1
        if self.ready_error is not None:
            raise self.ready_error
        return self.registration


class FakeBackend:
    """
    Push backend behind httpx.MockTransport.

    Status codes are configurable per route; every request is recorded.
    """

    def __init__(self, public_key=FALLBACK_VAPID_PUBLIC_KEY):
        self.public_key = public_key
        self.vapid_status = 200
        self.subscribe_status = 200
        self.unsubscribe_status = 200
        self.network_error = False
        self.on_request = None
        self.requests = []

    def requests_to(self, path):
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        if self.network_error:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if path == "/push/vapid":
            if self.vapid_status != 200:
                return httpx.Response(self.vapid_status, json={"detail": "unavailable"})
            return httpx.Response(200, json={"publicKey": self.public_key})
        if path == "/push/subscribe":
            if self.subscribe_status != 200:
                return httpx.Response(self.subscribe_status, json={"detail": "database is locked"})
            return httpx.Response(200, json={"message": "subscribed"})
        if path == "/push/unsubscribe":
            if self.unsubscribe_status != 200:
                return httpx.Response(self.unsubscribe_status, json={"detail": "endpoint and userId required"})
            return httpx.Response(200, json={"message": "unsubscribed", "removed": 1})
        return httpx.Response(404)


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def push_manager():
    return FakePushManager()


@pytest.fixture
def registration(push_manager):
    return FakeRegistration(push_manager)


@pytest.fixture
def container(registration):
    return FakeContainer(registration)


@pytest.fixture
def make_notifications():
    """Factory for a Notification API in a given permission state."""
    return FakeNotifications


@pytest.fixture
def make_container():
    """Factory for containers with custom push managers or ready() failures."""

    def _make(push_manager=None, ready_error=None):
        return FakeContainer(FakeRegistration(push_manager), ready_error=ready_error)

    return _make


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http_client(backend):
    """AsyncClient wired to the fake backend; MockTransport holds no sockets."""
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def recorded_sleeps():
    """A sleep coroutine that records requested durations instead of waiting."""
    durations = []

    async def sleep(seconds):
        durations.append(seconds)

    sleep.durations = durations
    return sleep


@pytest.fixture
def make_push_manager():
    """Factory for push managers, e.g. ``make_push_manager(regenerate=True)``."""
    return FakePushManager
