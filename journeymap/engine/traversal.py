"""
Reachability traversal and orphan state detection over a normalized journey map.
"""

import logging
from collections import deque
from typing import Any

from journeymap.engine.resolver import all_possible_targets, resolve_event_target
from journeymap.state.render_state import RuntimeOptions, StateClasses


logger = logging.getLogger(__name__)

Transition = tuple[str, str, list[str]]


def state_events(definition: dict[str, Any]) -> dict[str, Any]:
    """A state's events, falling back to its exit events."""
    # An empty events mapping also falls back to exit events
    return definition.get("events") or definition.get("exitEvents") or {}


def traverse_journey_map(
    journey_map: dict[str, Any],
    options: RuntimeOptions,
    state_classes: StateClasses,
) -> tuple[list[str], list[Transition]]:
    """
    Breadth-first walk from the initial states.

    Each event is resolved under the runtime options. Targets in the error
    (or failure) class are skipped entirely unless include_errors (or
    include_failures) is set. Events from one state that resolve to the same
    target are grouped into one transition, keeping first-seen order.

    Args:
        journey_map: Normalized journey map
        options: Runtime options
        state_classes: Initial, error and failure state classes

    Returns:
        (visited states in discovery order, transitions)
    """
    states: list[str] = []
    seen: set[str] = set()
    for state in state_classes.initial_states:
        if state not in seen:
            seen.add(state)
            states.append(state)

    queue = deque(states)
    transitions: list[Transition] = []

    while queue:
        state = queue.popleft()
        definition = journey_map.get(state) or {}

        events_by_target: dict[str, list[str]] = {}
        for event_name, event_definition in state_events(definition).items():
            target = resolve_event_target(event_definition, options)

            if target is None:
                logger.debug("Event %s on %s resolves to no target", event_name, state)
                continue
            if target in state_classes.error_states and not options.include_errors:
                continue
            if target in state_classes.failure_states and not options.include_failures:
                continue

            if target not in seen:
                seen.add(target)
                states.append(target)
                queue.append(target)
            events_by_target.setdefault(target, []).append(event_name)

        for target, event_names in events_by_target.items():
            transitions.append((state, target, event_names))

    return states, transitions


def find_orphan_states(journey_map: dict[str, Any], state_classes: StateClasses) -> list[str]:
    """
    States that no event can target under any runtime options.

    Every branch of every event and exit event counts as a possible target,
    as do the initial states.

    Returns:
        Orphan state IDs in journey map order
    """
    targeted: set[str] = set(state_classes.initial_states)
    for definition in journey_map.values():
        for events_key in ("events", "exitEvents"):
            for event_definition in (definition.get(events_key) or {}).values():
                targeted.update(t for t in all_possible_targets(event_definition) if t)

    return [state for state in journey_map if state not in targeted]
