"""Tests for handler dependency resolution."""

import json

import pytest

LOCATION = json.dumps({
    "lat": "40.6781784",
    "lng": "-73.9441579",
    "locality": "Brooklyn",
    "timezone": "America/New_York",
    "display": "Grand Central",
    "value": "abc123",
})


def stations(field_id, param):
    location = json.loads(param)
    return [
        {"display": f"{location['locality']} Central", "value": "abc123"},
        {"display": "Penn Station", "value": "xyz123"},
    ]


@pytest.fixture
def registry():
    from pyqt_previewsync.protocols import HandlerRegistry

    return HandlerRegistry({"get_stations": stations})


@pytest.fixture
def resolver(qapp, registry, runner):
    from pyqt_previewsync.schema import FieldSchema
    from pyqt_previewsync.sync import HandlerDependencyResolver

    resolver = HandlerDependencyResolver(registry, runner)
    resolver.set_schema([
        FieldSchema(id="station", type="locationbased", handler="get_stations"),
        FieldSchema(id="name", type="text"),
    ])
    return resolver


def test_options_empty_before_resolution(resolver):
    assert resolver.options("station") == ()
    assert resolver.options("unknown") == ()


def test_location_value_is_projected(resolver, runner):
    """Only coordinates, locality and timezone reach the handler."""
    resolver.evaluate({"station": LOCATION, "name": "x"})

    assert len(runner.calls) == 1
    field_id, param = runner.calls[0].args
    assert field_id == "station"
    assert json.loads(param) == {
        "lat": "40.6781784",
        "lng": "-73.9441579",
        "locality": "Brooklyn",
        "timezone": "America/New_York",
    }


def test_resolution_overwrites_options(resolver, runner):
    from pyqt_previewsync.state import HandlerOption

    changed = []
    resolver.options_changed.connect(changed.append)
    resolver.evaluate({"station": LOCATION})
    runner.resolve(0)

    assert resolver.options("station") == (
        HandlerOption(value="abc123", display="Brooklyn Central"),
        HandlerOption(value="xyz123", display="Penn Station"),
    )
    assert changed == ["station"]


def test_unchanged_value_is_not_resolved_again(resolver, runner):
    resolver.evaluate({"station": LOCATION})
    resolver.evaluate({"station": LOCATION, "name": "edited"})
    assert len(runner.calls) == 1


def test_out_of_order_responses_keep_latest(resolver, runner):
    """Invocations 1 then 2 resolving as 2, 1 leave invocation 2's payload."""
    queens = json.dumps({"lat": "40.7", "lng": "-73.8", "locality": "Queens", "timezone": "America/New_York"})

    resolver.evaluate({"station": LOCATION})
    resolver.evaluate({"station": queens})
    runner.resolve(1)
    runner.resolve(0)

    assert resolver.options("station")[0].display == "Queens Central"


def test_fields_resolve_independently(qapp, runner):
    from pyqt_previewsync.protocols import HandlerRegistry
    from pyqt_previewsync.schema import FieldSchema
    from pyqt_previewsync.sync import HandlerDependencyResolver

    def echo(field_id, param):
        return [{"value": param, "display": field_id}]

    resolver = HandlerDependencyResolver(HandlerRegistry({"echo": echo}), runner)
    resolver.set_schema([
        FieldSchema(id="a", type="typeahead", handler="echo"),
        FieldSchema(id="b", type="typeahead", handler="echo"),
    ])
    resolver.evaluate({"a": "1", "b": "1"})
    resolver.evaluate({"a": "2", "b": "1"})

    runner.resolve(1)  # b #1
    runner.resolve(2)  # a #2
    runner.resolve(0)  # a #1, stale for a only

    assert resolver.options("a")[0].value == "2"
    assert resolver.options("b")[0].value == "1"


def test_failure_keeps_previous_options(qapp, runner):
    from pyqt_previewsync.exceptions import HandlerError
    from pyqt_previewsync.protocols import HandlerRegistry
    from pyqt_previewsync.schema import FieldSchema
    from pyqt_previewsync.sync import HandlerDependencyResolver

    responses = [[{"value": "v1", "display": "first"}], HandlerError("backend down"), "not a list"]

    def flaky(field_id, param):
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    resolver = HandlerDependencyResolver(HandlerRegistry({"flaky": flaky}), runner)
    resolver.set_schema([FieldSchema(id="f", type="typeahead", handler="flaky")])

    resolver.evaluate({"f": "1"})
    runner.resolve(0)
    resolver.evaluate({"f": "2"})
    runner.resolve(1)
    resolver.evaluate({"f": "3"})
    runner.resolve(2)

    assert [option.display for option in resolver.options("f")] == ["first"]
    assert not resolver.in_flight("f")


def test_unknown_handler_is_skipped(qapp, runner):
    from pyqt_previewsync.protocols import HandlerRegistry
    from pyqt_previewsync.schema import FieldSchema
    from pyqt_previewsync.sync import HandlerDependencyResolver

    resolver = HandlerDependencyResolver(HandlerRegistry(), runner)
    resolver.set_schema([FieldSchema(id="f", type="typeahead", handler="missing")])

    assert resolver.evaluate({"f": "1"}) == []
    assert runner.calls == []
    assert resolver.options("f") == ()


def test_handler_bound_late_resolves_unchanged_value(qapp, runner):
    """A handler registered after the first pass still sees the current value."""
    from pyqt_previewsync.protocols import HandlerRegistry
    from pyqt_previewsync.schema import FieldSchema
    from pyqt_previewsync.sync import HandlerDependencyResolver

    registry = HandlerRegistry()
    resolver = HandlerDependencyResolver(registry, runner)
    resolver.set_schema([FieldSchema(id="f", type="typeahead", handler="h")])
    resolver.evaluate({"f": "1"})
    assert runner.calls == []

    registry.register("h", lambda field_id, param: [{"value": param}])
    assert resolver.evaluate({"f": "1"}) == ["f"]
    runner.resolve(0)
    assert resolver.options("f")[0].value == "1"


def test_absent_field_is_not_resolved(resolver, runner):
    resolver.evaluate({"name": "x"})
    assert runner.calls == []
