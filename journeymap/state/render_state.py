"""
Render state schema for the journey map LangGraph pipeline.

- Minimal typed state
- Reducers for accumulation (trace events)
- Runtime options and state classes are plain frozen values
"""

import copy
import os
from dataclasses import dataclass
from typing import Annotated, Any, Mapping, Optional

from typing_extensions import TypedDict


DEFAULT_INITIAL_STATES = ("INITIAL_IPV_JOURNEY",)
DEFAULT_ERROR_STATES = ("ERROR", "CRI_TICF_BEFORE_ERROR")
DEFAULT_FAILURE_STATES = (
    "PYI_KBV_FAIL",
    "PYI_NO_MATCH",
    "PYI_ANOTHER_WAY",
    "CRI_TICF_BEFORE_NO_MATCH",
    "CRI_TICF_BEFORE_ANOTHER_WAY",
)


def add_events(existing: list[dict[str, Any]] | None, new: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """
    Reducer for trace/event logs.

    LangGraph uses typing.Annotated reducers to merge state updates across nodes.
    """
    return (existing or []) + (new or [])


def _split_env_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class RuntimeOptions:
    """
    Runtime toggles that change which branches and states are drawn.

    Mirrors the query/form parameters accepted by the journey map viewer:
    repeatable ``disabledCri`` and ``flag`` values, plus presence flags.
    """
    disabled_cris: tuple[str, ...] = ()
    feature_flags: tuple[str, ...] = ()
    include_errors: bool = False
    include_failures: bool = False
    expand_nested_journeys: bool = False
    only_orphan_states: bool = False

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "RuntimeOptions":
        """
        Build options from query/form parameters.

        Args:
            params: Parameter name to value or list of values. Boolean
                toggles are enabled by presence alone.

        Returns:
            RuntimeOptions
        """
        def values(name: str) -> list[str]:
            raw = params.get(name)
            if raw is None:
                return []
            if isinstance(raw, (list, tuple)):
                return [str(v) for v in raw]
            return [str(raw)]

        return cls(
            disabled_cris=tuple(values("disabledCri")),
            feature_flags=tuple(values("flag") + values("featureFlag")),
            include_errors="includeErrors" in params,
            include_failures="includeFailures" in params,
            expand_nested_journeys="expandNestedJourneys" in params,
            only_orphan_states="onlyOrphanStates" in params,
        )


@dataclass(frozen=True)
class StateClasses:
    """Root, error and failure state classes for one journey map."""
    initial_states: tuple[str, ...] = DEFAULT_INITIAL_STATES
    error_states: tuple[str, ...] = DEFAULT_ERROR_STATES
    failure_states: tuple[str, ...] = DEFAULT_FAILURE_STATES

    @classmethod
    def from_env(cls) -> "StateClasses":
        """
        Read comma-separated overrides from the environment.

        JOURNEY_MAP_INITIAL_STATES, JOURNEY_MAP_ERROR_STATES and
        JOURNEY_MAP_FAILURE_STATES; unset variables keep the defaults.
        """
        overrides: dict[str, tuple[str, ...]] = {}
        for field_name, env_name in (
            ("initial_states", "JOURNEY_MAP_INITIAL_STATES"),
            ("error_states", "JOURNEY_MAP_ERROR_STATES"),
            ("failure_states", "JOURNEY_MAP_FAILURE_STATES"),
        ):
            value = os.getenv(env_name)
            if value is not None:
                overrides[field_name] = _split_env_list(value)
        return cls(**overrides)


class RenderState(TypedDict):
    """
    State carried through one render invocation.

    Fields:
    - journey_map: Private copy of the input journey map
    - nested_journeys: Private copy of the sub-journey registry
    - options: Runtime toggles
    - state_classes: Root/error/failure state classes
    - normalized_map: Journey map after parent and sub-journey expansion
    - states: Visited (or orphan) states in render order
    - transitions: (source, target, event names) in discovery order
    - diagram: Final Mermaid document
    - events: Append-only trace log
    - error: Fatal error message (if any)
    """

    journey_map: dict[str, Any]
    nested_journeys: dict[str, Any]
    options: RuntimeOptions
    state_classes: StateClasses

    normalized_map: dict[str, Any]
    states: list[str]
    transitions: list[tuple[str, str, list[str]]]
    diagram: str

    # Trace / observability (append-only event log)
    events: Annotated[list[dict[str, Any]], add_events]

    error: Optional[str]


def create_initial_state(
    journey_map: Mapping[str, Any],
    nested_journeys: Optional[Mapping[str, Any]] = None,
    options: Optional[RuntimeOptions] = None,
    state_classes: Optional[StateClasses] = None,
) -> RenderState:
    """
    Create initial state for a render invocation.

    The journey map and registry are deep-copied so the caller's documents
    are never touched by the pipeline.

    Args:
        journey_map: Journey map document
        nested_journeys: Sub-journey registry document
        options: Runtime toggles (defaults to none set)
        state_classes: State classes (defaults to the IPV journey classes)

    Returns:
        Initial RenderState
    """
    return {
        "journey_map": copy.deepcopy(dict(journey_map)),
        "nested_journeys": copy.deepcopy(dict(nested_journeys or {})),
        "options": options or RuntimeOptions(),
        "state_classes": state_classes or StateClasses(),
        "normalized_map": {},
        "states": [],
        "transitions": [],
        "diagram": "",
        "events": [],
        "error": None,
    }
