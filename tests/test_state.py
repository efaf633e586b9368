"""Tests for ConfigStore and MetadataStore."""

import pytest


def test_set_coerces_to_string(qapp):
    """Test ConfigStore stores every value as a string."""
    from pyqt_previewsync.state import ConfigStore

    store = ConfigStore()
    store.set("count", 3)
    store.set("enabled", True)
    store.set("location", {"lat": "40.1", "lng": "-73.9"})

    assert store.get("count") == "3"
    assert store.get("enabled") == "true"
    assert store.get("location") == '{"lat":"40.1","lng":"-73.9"}'


def test_changed_emitted_once_per_effective_change(qapp):
    """Test unchanged values don't notify."""
    from pyqt_previewsync.state import ConfigStore

    store = ConfigStore()
    notifications = []
    store.changed.connect(lambda: notifications.append(1))

    assert store.set("a", "1") is True
    assert store.set("a", "1") is False
    assert store.remove("a") is True
    assert store.remove("a") is False
    assert len(notifications) == 2


def test_get_all_is_immutable_snapshot(qapp):
    """Test get_all is detached from later edits and read-only."""
    from pyqt_previewsync.state import ConfigStore, ConfigEntry

    store = ConfigStore()
    store.set("a", "1")
    snapshot = store.get_all()
    store.set("a", "2")

    assert snapshot["a"] == ConfigEntry("a", "1")
    with pytest.raises(TypeError):
        snapshot["a"] = ConfigEntry("a", "3")


def test_reserved_ids_rejected(qapp):
    """Metadata keys can never become config fields."""
    from pyqt_previewsync.state import ConfigStore, RESERVED_KEYS

    store = ConfigStore()
    for key in RESERVED_KEYS:
        with pytest.raises(ValueError):
            store.set(key, "x")
    with pytest.raises(ValueError):
        store.replace_all({"ok": "1", "_metaLocale": "de-DE"})
    assert len(store) == 0


def test_reset_to_defaults_only_touches_defaulted_fields(qapp):
    """A declares default "x"; B has no default and keeps "keep"."""
    from pyqt_previewsync.state import ConfigStore
    from pyqt_previewsync.schema import FieldSchema

    store = ConfigStore()
    store.set("A", "edited")
    store.set("B", "keep")
    notifications = []
    store.changed.connect(lambda: notifications.append(1))

    changed = store.reset_to_defaults([
        FieldSchema(id="A", type="text", default="x"),
        FieldSchema(id="B", type="text"),
    ])

    assert store.values() == {"A": "x", "B": "keep"}
    assert changed == ["A"]
    assert len(notifications) == 1


def test_replace_all_is_wholesale(qapp):
    """Importing replaces everything; orphans disappear."""
    from pyqt_previewsync.state import ConfigStore

    store = ConfigStore()
    store.set("a", "old")
    store.set("c", "orphan")

    changed = store.replace_all({"a": "1", "b": "2"})

    assert store.values() == {"a": "1", "b": "2"}
    assert changed == ["a", "b", "c"]


def test_metadata_to_fields(qapp):
    """Render scale is only sent when set; timezone/locale always."""
    from pyqt_previewsync.state import MetadataEntry, RenderScale

    assert MetadataEntry().to_fields() == {"_metaTimezone": "", "_metaLocale": ""}
    fields = MetadataEntry(RenderScale.X2, "Europe/Berlin", "de-DE").to_fields()
    assert fields == {"_metaTimezone": "Europe/Berlin", "_metaLocale": "de-DE", "_renderScale": "2"}


def test_render_scale_from_wire():
    from pyqt_previewsync.state import RenderScale

    assert RenderScale.from_wire("1") is RenderScale.X1
    assert RenderScale.from_wire("2") is RenderScale.X2
    assert RenderScale.from_wire("3") is None
    assert RenderScale.from_wire(None) is None


def test_inject_defaults_fills_only_empty_fields(qapp):
    """Test environment detection never overrides hydrated values."""
    from pyqt_previewsync.state import MetadataStore

    store = MetadataStore()
    store.set_locale("fr-FR")
    assert store.inject_defaults(lambda: ("Asia/Tokyo", "ja-JP")) is True
    assert store.timezone == "Asia/Tokyo"
    assert store.locale == "fr-FR"


def test_inject_defaults_latch(qapp):
    """Explicit "" between two injections survives the second one."""
    from pyqt_previewsync.state import MetadataStore

    calls = []
    def detector():
        calls.append(1)
        return "America/Chicago", "en-US"

    store = MetadataStore()
    store.inject_defaults(detector)
    assert store.timezone == "America/Chicago"

    store.set_timezone("")
    assert store.inject_defaults(detector) is False
    assert store.timezone == ""
    assert len(calls) == 1
