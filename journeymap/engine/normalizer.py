"""
Journey map normalization: parent expansion and sub-journey inlining.

Both steps build a new journey map instead of editing the input. Mapping
order is preserved throughout (dicts keep insertion order), since event order
decides edge label grouping and state order decides render order.
"""

import copy
import logging
from typing import Any, Optional

from journeymap.engine.errors import JourneyMapError
from journeymap.engine.resolver import CHECK_FEATURE_FLAG, CHECK_IF_DISABLED, iter_branches


logger = logging.getLogger(__name__)

DEFAULT_MAX_NESTING_DEPTH = 5


def namespaced_state(state: str, outer_state: str) -> str:
    """Name of a sub-journey state once inlined under outer_state."""
    return f"{state}_{outer_state}"


class JourneyMapNormalizer:
    """
    Flatten a journey map for traversal and rendering.

    Non-fatal problems found while inlining sub-journeys are logged and kept
    in ``warnings`` as trace events.
    """

    def __init__(
        self,
        nested_journeys: Optional[dict[str, Any]] = None,
        max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH,
    ):
        self.nested_journeys = nested_journeys or {}
        self.max_nesting_depth = max_nesting_depth
        self.warnings: list[dict[str, Any]] = []
        self._reported_unknown: set[str] = set()

    def normalize(self, journey_map: dict[str, Any], expand_nested_journeys: bool = False) -> dict[str, Any]:
        """
        Expand parents, then optionally inline sub-journeys.

        Args:
            journey_map: Journey map (left untouched)
            expand_nested_journeys: Inline states referencing a nestedJourney

        Returns:
            New, normalized journey map
        """
        normalized = self.expand_parents(journey_map)
        if expand_nested_journeys:
            normalized = self.expand_nested_journeys(normalized)
        return normalized

    def expand_parents(self, journey_map: dict[str, Any]) -> dict[str, Any]:
        """
        Merge each state with its parent template and drop the templates.

        The state's own events override parent events of the same name and
        its other fields override the parent's. This is a single pass: a
        parent's own parent is not applied.

        Raises:
            JourneyMapError: If a parent reference names an unknown state
        """
        expanded: dict[str, Any] = {}
        parent_states: set[str] = set()

        for state, definition in journey_map.items():
            parent_id = definition.get("parent")
            if not parent_id:
                expanded[state] = copy.deepcopy(definition)
                continue

            if parent_id not in journey_map:
                raise JourneyMapError(f"State '{state}' references unknown parent '{parent_id}'")

            parent = journey_map[parent_id]
            merged = copy.deepcopy(parent)
            merged.update(copy.deepcopy(definition))
            if "events" in parent or "events" in definition:
                merged["events"] = {
                    **copy.deepcopy(parent.get("events") or {}),
                    **copy.deepcopy(definition.get("events") or {}),
                }
            expanded[state] = merged
            parent_states.add(parent_id)

        return {state: d for state, d in expanded.items() if state not in parent_states}

    def expand_nested_journeys(self, journey_map: dict[str, Any]) -> dict[str, Any]:
        """
        Inline every state that references a known sub-journey.

        Sub-journeys that themselves contain nested journeys are expanded
        again on the next pass, up to max_nesting_depth passes.
        """
        current = self._expand_once(journey_map)
        for _ in range(self.max_nesting_depth - 1):
            if not self._has_expandable_state(current):
                return current
            current = self._expand_once(current)

        if self._has_expandable_state(current):
            logger.warning(
                "Nested journeys still present after %d expansion passes", self.max_nesting_depth
            )
            self.warnings.append({"kind": "nesting_depth_exceeded", "depth": self.max_nesting_depth})
        return current

    def _has_expandable_state(self, journey_map: dict[str, Any]) -> bool:
        return any(
            d.get("nestedJourney") in self.nested_journeys
            for d in journey_map.values()
            if d.get("nestedJourney")
        )

    def _expand_once(self, journey_map: dict[str, Any]) -> dict[str, Any]:
        expanded: dict[str, Any] = {}
        inlined: dict[str, dict[str, Any]] = {}

        for state, definition in journey_map.items():
            nested_id = definition.get("nestedJourney")
            if not nested_id:
                expanded[state] = copy.deepcopy(definition)
                continue

            subjourney = self.nested_journeys.get(nested_id)
            if subjourney is None:
                if state not in self._reported_unknown:
                    self._reported_unknown.add(state)
                    logger.warning("Unknown nested journey for %s: %s", state, nested_id)
                    self.warnings.append(
                        {"kind": "unknown_nested_journey", "state": state, "nested_journey": nested_id}
                    )
                expanded[state] = copy.deepcopy(definition)
                continue

            sub_states = subjourney.get("nestedJourneyStates") or {}
            for nested_state, nested_definition in sub_states.items():
                expanded[namespaced_state(nested_state, state)] = self._inline_state(
                    nested_definition, state, definition, sub_states
                )
            inlined[state] = subjourney

        # Point external entry events at the inlined entry states
        for outer_state, subjourney in inlined.items():
            for entry_event, entry_definition in (subjourney.get("entryEvents") or {}).items():
                entry_target = entry_definition.get("targetState")
                if not entry_target:
                    continue
                for definition in expanded.values():
                    event = (definition.get("events") or {}).get(entry_event)
                    if event is not None:
                        _retarget(event, outer_state, namespaced_state(entry_target, outer_state))

        return expanded

    def _inline_state(
        self,
        nested_definition: dict[str, Any],
        outer_state: str,
        outer_definition: dict[str, Any],
        sub_states: dict[str, Any],
    ) -> dict[str, Any]:
        inlined = copy.deepcopy(nested_definition)
        for events_key in ("events", "exitEvents"):
            events = inlined.get(events_key)
            if not events:
                continue
            for event_name in list(events):
                event = self._inline_event(events[event_name], outer_state, outer_definition, sub_states)
                if event is None:
                    del events[event_name]
                else:
                    events[event_name] = event
        return inlined

    def _inline_event(
        self,
        event: dict[str, Any],
        outer_state: str,
        outer_definition: dict[str, Any],
        sub_states: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        """
        Rewrite one inlined event definition (in place) for its new home.

        Returns None when the event emits an exit event the outer state does
        not handle, meaning the event (or branch) should be dropped. An exit
        event takes the outer exit definition as its base; the event's own
        branches are kept ahead of the exit definition's branches.
        """
        exit_event = event.get("exitEventToEmit")
        exit_definition = None
        if exit_event:
            exit_definition = (outer_definition.get("exitEvents") or {}).get(exit_event)
            if exit_definition is None:
                logger.warning("Unhandled exit event from %s: %s", outer_state, exit_event)
                self.warnings.append(
                    {"kind": "unhandled_exit_event", "state": outer_state, "exit_event": exit_event}
                )
                return None

        target = event.get("targetState")
        if target in sub_states:
            event["targetState"] = namespaced_state(target, outer_state)

        for kind, key, branch in list(iter_branches(event)):
            rewritten = self._inline_event(branch, outer_state, outer_definition, sub_states)
            if rewritten is None:
                del event[kind][key]
            else:
                event[kind][key] = rewritten

        if exit_definition is None:
            return event

        merged = copy.deepcopy(exit_definition)
        for kind in (CHECK_IF_DISABLED, CHECK_FEATURE_FLAG):
            own_branches = event.get(kind)
            if not own_branches:
                continue
            exit_branches = merged.get(kind) or {}
            merged[kind] = {
                **own_branches,
                **{key: b for key, b in exit_branches.items() if key not in own_branches},
            }
        return merged


def _retarget(event: dict[str, Any], old_target: str, new_target: str) -> None:
    if event.get("targetState") == old_target:
        event["targetState"] = new_target
    for _, _, branch in iter_branches(event):
        _retarget(branch, old_target, new_target)
