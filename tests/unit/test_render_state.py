"""
Unit tests for render state, runtime options and state classes.
"""

import copy

from journeymap.state.render_state import (
    DEFAULT_INITIAL_STATES,
    RuntimeOptions,
    StateClasses,
    add_events,
    create_initial_state,
)


class TestRuntimeOptions:
    """Test RuntimeOptions.from_query."""

    def test_empty_query(self):
        """No parameters means nothing set."""
        assert RuntimeOptions.from_query({}) == RuntimeOptions()

    def test_repeatable_values(self):
        """disabledCri and flag collect every value in order."""
        options = RuntimeOptions.from_query({"disabledCri": ["dcmaw", "f2f"], "flag": ["resetIdentity"]})

        assert options.disabled_cris == ("dcmaw", "f2f")
        assert options.feature_flags == ("resetIdentity",)

    def test_single_value(self):
        """A single string value is accepted."""
        assert RuntimeOptions.from_query({"disabledCri": "dcmaw"}).disabled_cris == ("dcmaw",)

    def test_feature_flag_alias(self):
        """featureFlag values are merged after flag values."""
        options = RuntimeOptions.from_query({"flag": ["a"], "featureFlag": ["b"]})

        assert options.feature_flags == ("a", "b")

    def test_presence_flags(self):
        """Boolean toggles are set by presence, whatever their value."""
        options = RuntimeOptions.from_query({
            "includeErrors": "",
            "includeFailures": "off",
            "expandNestedJourneys": ["on"],
            "onlyOrphanStates": None,
        })

        assert options.include_errors
        assert options.include_failures
        assert options.expand_nested_journeys
        assert options.only_orphan_states


class TestStateClasses:
    """Test StateClasses.from_env."""

    def test_defaults(self, monkeypatch):
        """Unset variables keep the defaults."""
        for name in ("JOURNEY_MAP_INITIAL_STATES", "JOURNEY_MAP_ERROR_STATES", "JOURNEY_MAP_FAILURE_STATES"):
            monkeypatch.delenv(name, raising=False)

        assert StateClasses.from_env() == StateClasses()
        assert StateClasses().initial_states == DEFAULT_INITIAL_STATES

    def test_overrides(self, monkeypatch):
        """Comma-separated values replace the defaults."""
        monkeypatch.setenv("JOURNEY_MAP_INITIAL_STATES", "START, OTHER_START")
        monkeypatch.setenv("JOURNEY_MAP_ERROR_STATES", "")
        monkeypatch.delenv("JOURNEY_MAP_FAILURE_STATES", raising=False)

        classes = StateClasses.from_env()

        assert classes.initial_states == ("START", "OTHER_START")
        assert classes.error_states == ()
        assert classes.failure_states == StateClasses().failure_states


class TestCreateInitialState:
    """Test create_initial_state."""

    def test_defaults(self, sample_journey_map):
        """Options and classes default when omitted."""
        state = create_initial_state(sample_journey_map)

        assert state["options"] == RuntimeOptions()
        assert state["state_classes"] == StateClasses()
        assert state["nested_journeys"] == {}
        assert state["events"] == []
        assert state["error"] is None

    def test_inputs_copied(self, sample_journey_map, sample_nested_journeys):
        """The pipeline works on private copies of its inputs."""
        before = copy.deepcopy(sample_journey_map)

        state = create_initial_state(sample_journey_map, sample_nested_journeys)
        state["journey_map"]["DCMAW"]["events"].clear()
        state["nested_journeys"].clear()

        assert sample_journey_map == before
        assert "NINO_SUBJOURNEY" in sample_nested_journeys


def test_add_events():
    """Events accumulate across updates."""
    assert add_events(None, [{"kind": "a"}]) == [{"kind": "a"}]
    assert add_events([{"kind": "a"}], [{"kind": "b"}]) == [{"kind": "a"}, {"kind": "b"}]
    assert add_events([{"kind": "a"}], None) == [{"kind": "a"}]
