"""
Notifications push côté worker : configuration, affichage, clic.
"""
from typing import Any, Dict, List, Optional

import pytest

from teamup.worker.events import ExtendableEvent
from teamup.worker.messaging import ClientNotificationDispatcher, build_notification

ORIGIN = "https://teamup.app"
CONFIG = {"type": "FIREBASE_CONFIG", "config": {"projectId": "teamup"}}


class FakeClient:
    def __init__(self, url: str):
        self.url = url
        self.focused = False
        self.navigated_to: Optional[str] = None

    async def focus(self) -> None:
        self.focused = True

    async def navigate(self, url: str) -> None:
        self.navigated_to = url


class FakeNotification:
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeHost:
    origin = ORIGIN

    def __init__(self, clients: Optional[List[FakeClient]] = None):
        self.clients = clients or []
        # Un seul affichage par tag, comme le navigateur
        self.shown: Dict[str, Dict[str, Any]] = {}
        self.opened: List[str] = []

    async def show_notification(self, title: str, options: Dict[str, Any]) -> None:
        self.shown[options["tag"]] = {"title": title, **options}

    async def match_clients(self) -> List[FakeClient]:
        return self.clients

    async def open_window(self, url: str) -> FakeClient:
        self.opened.append(url)
        return FakeClient(url)


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def factory_calls():
    return []


@pytest.fixture
def dispatcher(host, factory_calls):
    def factory(config):
        factory_calls.append(config)
        return object()

    return ClientNotificationDispatcher(host, factory)


class TestConfiguration:

    def test_first_config_initializes_messaging(self, dispatcher, factory_calls):
        assert dispatcher.on_message(CONFIG) is True
        assert dispatcher.initialized
        assert factory_calls == [{"projectId": "teamup"}]

    def test_later_config_is_ignored(self, dispatcher, factory_calls):
        dispatcher.on_message(CONFIG)

        assert dispatcher.on_message({"type": "FIREBASE_CONFIG", "config": {"projectId": "other"}}) is False
        assert len(factory_calls) == 1

    @pytest.mark.parametrize("message", [None, "FIREBASE_CONFIG", {"type": "SKIP_WAITING"}])
    def test_unrelated_messages(self, dispatcher, message):
        assert dispatcher.on_message(message) is False
        assert not dispatcher.initialized


class TestPush:

    async def test_push_before_config_is_ignored(self, dispatcher, host):
        event = ExtendableEvent()

        assert dispatcher.on_push({"notification": {"title": "Match"}}, event) is False
        await event.settle()

        assert host.shown == {}

    async def test_push_shows_notification(self, dispatcher, host):
        dispatcher.on_message(CONFIG)
        event = ExtendableEvent()

        dispatcher.on_push(
            {"notification": {"title": "Nouveau match", "body": "Foot à 18h"}, "data": {"url": "/events/E1"}},
            event,
        )
        await event.settle()

        shown = host.shown["teamup-notification"]
        assert shown["title"] == "Nouveau match"
        assert shown["body"] == "Foot à 18h"
        assert shown["data"] == {"url": "/events/E1"}

    async def test_same_tag_replaces_previous(self, dispatcher, host):
        dispatcher.on_message(CONFIG)
        event = ExtendableEvent()

        dispatcher.on_push({"notification": {"body": "premier"}, "data": {"tag": "event-E1"}}, event)
        dispatcher.on_push({"notification": {"body": "second"}, "data": {"tag": "event-E1"}}, event)
        await event.settle()

        assert list(host.shown) == ["event-E1"]
        assert host.shown["event-E1"]["body"] == "second"

    def test_defaults(self):
        title, options = build_notification({})

        assert title == "TeamUp"
        assert options["body"] == "Nouvelle notification"
        assert options["tag"] == "teamup-notification"
        assert [a["action"] for a in options["actions"]] == ["open", "close"]


class TestNotificationClick:

    async def test_focuses_existing_window_and_navigates(self, dispatcher):
        window = FakeClient(ORIGIN + "/home")
        dispatcher.host.clients = [FakeClient("https://elsewhere.com/"), window]
        notification = FakeNotification({"url": "/events/E1"})
        event = ExtendableEvent()

        dispatcher.on_notification_click(notification, None, event)
        await event.settle()

        assert notification.closed
        assert window.focused
        assert window.navigated_to == "/events/E1"
        assert dispatcher.host.opened == []

    async def test_root_url_only_focuses(self, dispatcher):
        window = FakeClient(ORIGIN + "/profile")
        dispatcher.host.clients = [window]
        event = ExtendableEvent()

        dispatcher.on_notification_click(FakeNotification(), "open", event)
        await event.settle()

        assert window.focused
        assert window.navigated_to is None

    async def test_opens_window_when_none_exists(self, dispatcher, host):
        event = ExtendableEvent()

        dispatcher.on_notification_click(FakeNotification({}), None, event)
        await event.settle()

        assert host.opened == [ORIGIN + "/"]

    async def test_close_action_only_closes(self, dispatcher, host):
        notification = FakeNotification({"url": "/events/E1"})
        event = ExtendableEvent()

        dispatcher.on_notification_click(notification, "close", event)
        await event.settle()

        assert notification.closed
        assert host.opened == []
        assert event.pending == 0
