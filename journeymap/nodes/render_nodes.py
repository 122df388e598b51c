"""
LangGraph node implementations for the journey map render pipeline.

- Single responsibility per node
- Sync only (pure, CPU-bound)
- Nodes return partial state updates
"""

import logging
from typing import Any

from journeymap.actions.diagram_generation import build_journey_mermaid
from journeymap.engine.errors import JourneyMapError
from journeymap.engine.normalizer import JourneyMapNormalizer
from journeymap.engine.traversal import find_orphan_states, traverse_journey_map
from journeymap.state.render_state import RenderState


logger = logging.getLogger(__name__)


def _evt(kind: str, **fields: Any) -> dict[str, Any]:
    """Create a structured trace event for observability/watch mode."""
    evt: dict[str, Any] = {"kind": kind}
    evt.update(fields)
    return evt


def normalize_node(state: RenderState) -> dict[str, Any]:
    """
    Expand parent states and, if requested, inline nested journeys.

    Args:
        state: Current render state

    Returns:
        Updates to state
    """
    options = state["options"]
    normalizer = JourneyMapNormalizer(state.get("nested_journeys"))

    try:
        normalized = normalizer.normalize(
            state["journey_map"],
            expand_nested_journeys=options.expand_nested_journeys,
        )
    except JourneyMapError as e:
        logger.error("Failed to normalize journey map: %s", e)
        return {
            "error": f"Failed to normalize journey map: {e}",
            "events": [_evt("error", stage="normalize", message=str(e))],
        }

    logger.debug("Normalized journey map: %d states", len(normalized))
    events = list(normalizer.warnings)
    events.append(_evt("normalized", states=len(normalized)))
    return {"normalized_map": normalized, "events": events}


def traverse_node(state: RenderState) -> dict[str, Any]:
    """Walk the normalized map from the initial states."""
    states, transitions = traverse_journey_map(
        state["normalized_map"],
        state["options"],
        state["state_classes"],
    )
    logger.debug("Traversal visited %d states", len(states))
    return {
        "states": states,
        "transitions": transitions,
        "events": [_evt("traversed", states=len(states), transitions=len(transitions))],
    }


def find_orphans_node(state: RenderState) -> dict[str, Any]:
    """Select the states that nothing can ever target."""
    orphans = find_orphan_states(state["normalized_map"], state["state_classes"])
    logger.debug("Found %d orphan states", len(orphans))
    return {
        "states": orphans,
        "transitions": [],
        "events": [_evt("orphans_found", states=len(orphans))],
    }


def render_node(state: RenderState) -> dict[str, Any]:
    """Render the selected states and transitions to Mermaid."""
    diagram = build_journey_mermaid(
        state["normalized_map"],
        state["states"],
        state["transitions"],
        state["state_classes"],
    )
    return {
        "diagram": diagram,
        "events": [_evt("rendered", lines=diagram.count("\n"))],
    }


def route_after_normalize(state: RenderState) -> str:
    """
    Choose the next step after normalization.

    Returns:
        "error" if normalization failed, "orphans" in orphan mode,
        otherwise "traverse"
    """
    if state.get("error"):
        return "error"
    if state["options"].only_orphan_states:
        return "orphans"
    return "traverse"
