"""Tests for serialization contexts, property filters and options."""

import pytest

from ghjson.config import (DeserializationOptions, PlacementSettings, PropertyFilter,
                           PropertyFilterConfig, SerializationContext, SerializationOptions)
from ghjson.host import NodeKind


class TestPropertyFilter:
    """Allowed names per context and node kind."""

    def test_full_includes_everything_for_kind(self):
        allowed = PropertyFilter().allowed_names(NodeKind.SLIDER)
        assert {"NickName", "Locked", "Hidden", "CurrentValue", "Rounding"} <= allowed
        assert "UserText" not in allowed

    def test_compact(self):
        f = PropertyFilter(SerializationContext.COMPACT)
        assert "Hidden" not in f.allowed_names(NodeKind.PANEL)
        assert "UserText" in f.allowed_names(NodeKind.PANEL)
        assert "Value" not in f.allowed_names(NodeKind.TOGGLE)

    def test_ai_optimized_keeps_ui_kinds(self):
        f = PropertyFilter(SerializationContext.AI_OPTIMIZED)
        assert "Color" in f.allowed_names(NodeKind.SWATCH)
        assert f.include_parameter_settings

    def test_parameters_only(self):
        f = PropertyFilter(SerializationContext.PARAMETERS_ONLY)
        assert f.allowed_names(NodeKind.SCRIPT) == PropertyFilterConfig.CORE_PROPERTIES
        assert not f.is_allowed("Script", NodeKind.SCRIPT)

    @pytest.mark.parametrize("context", list(SerializationContext))
    def test_denylist_never_allowed(self, context):
        f = PropertyFilter(context)
        for kind in NodeKind:
            assert not f.allowed_names(kind) & PropertyFilterConfig.GLOBAL_DENYLIST

    def test_cached(self):
        f = PropertyFilter()
        assert f.allowed_names(NodeKind.PANEL) is f.allowed_names(NodeKind.PANEL)


def test_option_defaults():
    """Defaults capture everything and repair ids on load."""
    options = SerializationOptions()
    assert options.context is SerializationContext.FULL
    assert options.include_pivots and options.include_persistent_data
    load = DeserializationOptions()
    assert load.fix_instance_ids and load.drop_incomplete_pivots
    assert load.placement == PlacementSettings(200.0, 100.0, 100.0, (0.0, 0.0))


def test_ai_optimized_preset():
    """The lean preset drops display text and selection."""
    options = SerializationOptions.ai_optimized()
    assert not options.include_human_readable
    assert not options.include_selection
    assert options.include_parameter_settings
