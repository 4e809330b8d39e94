"""End-to-end tests of HueEngine over a mocked bridge."""

from unittest.mock import MagicMock

import pytest
from conftest import DEVICE_ID, LIGHT_ID, ROOM_ID, InlineExecutor

from huegraph.bootstrap import CONFIG_PATH, RESOURCE_PATH
from huegraph.engine import HueEngine
from huegraph.errors import UnknownCommandError, UnknownPropertyError, UnknownResourceError
from huegraph.resources.kinds import ResourceKind


@pytest.fixture
def engine(settings, http, dispatcher, bridge_resources):
    answers = {
        CONFIG_PATH: {"swversion": "1962097030"},
        RESOURCE_PATH: {"errors": [], "data": bridge_resources},
    }
    http.get.side_effect = lambda path, timeout=5: answers[path]
    http.request.return_value = {"data": [], "errors": []}
    engine = HueEngine(settings, http=http, dispatcher=dispatcher, executor=InlineExecutor())
    engine.stream.start = MagicMock()
    return engine


@pytest.fixture
def ready_engine(engine, dispatcher):
    ready = MagicMock()
    engine.start(on_ready=ready)
    dispatcher.run_pending()
    ready.assert_called_once_with()
    return engine


class TestEngine:
    def test_nothing_loaded_before_start(self, engine):
        assert engine.get_resource(LIGHT_ID) is None
        assert engine.resource_ids() == set()
        assert engine.get_resources("light") == {}
        with pytest.raises(UnknownResourceError):
            engine.registry

    def test_start_loads_and_streams(self, ready_engine):
        ready_engine.stream.start.assert_called_once_with()
        assert LIGHT_ID in ready_engine.resource_ids()
        assert list(ready_engine.get_resources(ResourceKind.ROOM)) == [ROOM_ID]

    def test_subscribe_runs_on_timeline(self, ready_engine, dispatcher):
        seen = []
        ready_engine.subscribe(DEVICE_ID, "on", lambda key, value, node: seen.append(value))
        assert ready_engine.get_resource(LIGHT_ID).listener_count("on") == 0

        dispatcher.run_pending()
        ready_engine.stream.handle_events([{"type": "update", "data": [{"id": LIGHT_ID, "on": {"on": True}}]}])

        assert seen == [True]

    def test_unsubscribe(self, ready_engine, dispatcher):
        listener = MagicMock()
        ready_engine.subscribe(LIGHT_ID, "on", listener)
        ready_engine.unsubscribe(LIGHT_ID, "on", listener)
        dispatcher.run_pending()

        assert ready_engine.get_resource(LIGHT_ID).listener_count("on") == 0

    def test_subscribe_validation(self, ready_engine):
        with pytest.raises(UnknownResourceError):
            ready_engine.subscribe("ghost", "on", print)
        with pytest.raises(UnknownPropertyError):
            ready_engine.subscribe(LIGHT_ID, "motion", print)

    def test_issue_command_resolves_through_services(self, ready_engine, http, dispatcher):
        ready_engine.issue_command(DEVICE_ID, "set_dim", 40, 500)
        http.request.assert_not_called()

        dispatcher.run_pending()

        http.request.assert_called_once_with(
            "PUT", f"/clip/v2/resource/light/{LIGHT_ID}",
            {"dimming": {"brightness": 40}, "dynamics": {"duration": 500}}, timeout=5.0,
        )

    def test_unknown_command(self, ready_engine):
        with pytest.raises(UnknownCommandError):
            ready_engine.issue_command(LIGHT_ID, "recall")

    def test_command_for_deleted_resource_is_dropped(self, ready_engine, http, dispatcher):
        ready_engine.issue_command(LIGHT_ID, "turn_on")
        ready_engine.stream.handle_events([{"type": "delete", "data": [{"id": LIGHT_ID, "type": "light"}]}])
        dispatcher.run_pending()

        http.request.assert_not_called()

    def test_repository_and_groups(self, ready_engine, http):
        group = ready_engine.repository.find_grouped_light("Living")
        ready_engine.groups.turn_off(group.id)

        assert http.request.call_args.args[1] == f"/clip/v2/resource/grouped_light/{group.id}"

    def test_stop(self, ready_engine, http):
        ready_engine.stream.stop = MagicMock()
        ready_engine.stop()

        ready_engine.stream.stop.assert_called_once_with()
        http.close.assert_called_once_with()
