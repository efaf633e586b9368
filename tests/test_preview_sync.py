"""Tests for preview submission, coalescing and supersession."""

import pytest


def _entries(**values):
    from pyqt_previewsync.state import ConfigEntry

    return {key: ConfigEntry(key, value) for key, value in values.items()}


@pytest.fixture
def preview_sync(qapp, backend, runner):
    from pyqt_previewsync.protocols import EditorConfig
    from pyqt_previewsync.sync import PreviewSync

    return PreviewSync(backend, runner, config=EditorConfig())


def test_payload_contains_all_entries_and_metadata():
    """Oversized entries are still submitted."""
    from pyqt_previewsync.state import MetadataEntry, RenderScale
    from pyqt_previewsync.sync import build_payload

    payload = build_payload(
        _entries(name="x", image="y" * 5000),
        MetadataEntry(RenderScale.X2, "UTC", "en-GB"),
    )
    assert payload == {
        "name": "x",
        "image": "y" * 5000,
        "_metaTimezone": "UTC",
        "_metaLocale": "en-GB",
        "_renderScale": "2",
    }


def test_identical_inputs_issue_nothing(preview_sync, runner):
    from pyqt_previewsync.state import MetadataEntry

    assert preview_sync.evaluate(_entries(name="a"), MetadataEntry()) == 1
    assert preview_sync.evaluate(_entries(name="a"), MetadataEntry()) is None
    assert len(runner.calls) == 1


def test_out_of_order_resolution_keeps_latest(preview_sync, runner):
    """Requests 1..3 resolved as [2, 3, 1] leave response(3) displayed."""
    from pyqt_previewsync.state import MetadataEntry

    for name in ("one", "two", "three"):
        preview_sync.evaluate(_entries(name=name), MetadataEntry())
    assert len(runner.calls) == 3

    updates = []
    preview_sync.preview_updated.connect(updates.append)
    for index in (1, 2, 0):
        runner.resolve(index)

    assert preview_sync.result.title == "three"
    assert preview_sync.result.image_bytes == b"img:three"
    assert not preview_sync.result.loading
    assert [result.title for result in updates] == ["two", "three"]


def test_first_paint_never_starved(preview_sync, runner):
    """Before any result arrives, every change is submitted even while in flight."""
    from pyqt_previewsync.state import MetadataEntry

    preview_sync.evaluate(_entries(name="a"), MetadataEntry())
    assert preview_sync.in_flight
    preview_sync.evaluate(_entries(name="b"), MetadataEntry())
    assert len(runner.calls) == 2


def test_coalesces_while_in_flight_after_first_result(preview_sync, runner):
    """Once a preview exists, changes during a request are suppressed."""
    from pyqt_previewsync.state import MetadataEntry

    preview_sync.evaluate(_entries(name="a"), MetadataEntry())
    runner.resolve(0)
    assert preview_sync.has_result

    preview_sync.evaluate(_entries(name="b"), MetadataEntry())
    assert preview_sync.evaluate(_entries(name="c"), MetadataEntry()) is None
    assert len(runner.calls) == 2

    runner.resolve(1)
    assert preview_sync.result.title == "b"
    # No retrigger until the next state change
    assert len(runner.calls) == 2

    preview_sync.evaluate(_entries(name="d"), MetadataEntry())
    assert len(runner.calls) == 3


def test_trailing_refresh_resubmits_coalesced_change(qapp, backend, runner):
    from pyqt_previewsync.protocols import EditorConfig
    from pyqt_previewsync.state import MetadataEntry
    from pyqt_previewsync.sync import PreviewSync

    preview_sync = PreviewSync(backend, runner, config=EditorConfig(preview_trailing_refresh=True))
    preview_sync.evaluate(_entries(name="a"), MetadataEntry())
    runner.resolve(0)
    preview_sync.evaluate(_entries(name="b"), MetadataEntry())
    preview_sync.evaluate(_entries(name="c"), MetadataEntry())

    runner.resolve(1)
    assert len(runner.calls) == 3
    runner.resolve(2)
    assert preview_sync.result.title == "c"


def test_failure_keeps_last_image(preview_sync, runner, backend):
    """A failed request surfaces an error but does not blank the preview."""
    from pyqt_previewsync.exceptions import PreviewRequestError
    from pyqt_previewsync.state import MetadataEntry

    errors = []
    preview_sync.error_occurred.connect(errors.append)

    preview_sync.evaluate(_entries(name="good"), MetadataEntry())
    runner.resolve(0)

    backend.fail_with = PreviewRequestError("connection refused")
    preview_sync.evaluate(_entries(name="bad"), MetadataEntry())
    runner.resolve(1)

    assert errors == ["connection refused"]
    assert preview_sync.error == "connection refused"
    assert preview_sync.result.title == "good"
    assert preview_sync.result.image_bytes == b"img:good"
    assert not preview_sync.result.loading


def test_stale_failure_is_ignored(preview_sync, runner, backend):
    """A failure of a request older than the applied result is not an error."""
    from pyqt_previewsync.state import MetadataEntry

    errors = []
    preview_sync.error_occurred.connect(errors.append)

    preview_sync.evaluate(_entries(name="a"), MetadataEntry())
    preview_sync.evaluate(_entries(name="b"), MetadataEntry())
    runner.resolve(1)

    backend.fail_with = RuntimeError("late failure")
    runner.resolve(0)

    assert errors == []
    assert preview_sync.result.title == "b"


def test_loading_flag_tracks_requests(preview_sync, runner):
    from pyqt_previewsync.state import MetadataEntry

    states = []
    preview_sync.loading_changed.connect(states.append)

    preview_sync.evaluate(_entries(name="a"), MetadataEntry())
    assert preview_sync.result.loading
    runner.resolve(0)
    assert not preview_sync.result.loading
    assert states == [True, False]
