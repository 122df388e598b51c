"""
LangGraph graph definition for the journey map render pipeline.

- Explicit routing (no cycles)
- No checkpointer: each invocation is independent
- Clear node definitions
"""

from typing import Any, Mapping, Optional

from langgraph.graph import StateGraph, END

from journeymap.engine.errors import JourneyMapError
from journeymap.state.render_state import (
    RenderState,
    RuntimeOptions,
    StateClasses,
    create_initial_state,
)
from journeymap.nodes.render_nodes import (
    normalize_node,
    traverse_node,
    find_orphans_node,
    render_node,
    route_after_normalize,
)


def create_render_graph():
    """
    Create the render graph.

    Flow:
    1. normalize: Expand parents, optionally inline nested journeys
    2. Route: traverse (default), find_orphans (orphan mode) or end (error)
    3. render: Emit the Mermaid document

    Returns:
        Compiled graph
    """
    builder = StateGraph(RenderState)

    # Add nodes
    builder.add_node("normalize", normalize_node)
    builder.add_node("traverse", traverse_node)
    builder.add_node("find_orphans", find_orphans_node)
    builder.add_node("render", render_node)

    # Entry point
    builder.set_entry_point("normalize")

    # Traversal and orphan detection are mutually exclusive
    builder.add_conditional_edges(
        "normalize",
        route_after_normalize,
        {
            "traverse": "traverse",
            "orphans": "find_orphans",
            "error": END,
        }
    )

    builder.add_edge("traverse", "render")
    builder.add_edge("find_orphans", "render")
    builder.add_edge("render", END)

    return builder.compile()


# Export graph for langgraph.json
graph = create_render_graph()


def run_render(
    journey_map: Mapping[str, Any],
    nested_journeys: Optional[Mapping[str, Any]] = None,
    options: Optional[RuntimeOptions] = None,
    state_classes: Optional[StateClasses] = None,
) -> RenderState:
    """
    Run the pipeline and return the final state (diagram plus trace events).

    Raises:
        JourneyMapError: If the journey map could not be normalized
    """
    initial_state = create_initial_state(journey_map, nested_journeys, options, state_classes)
    result = graph.invoke(initial_state)
    if result.get("error"):
        raise JourneyMapError(result["error"])
    return result


def render_journey_map(
    journey_map: Mapping[str, Any],
    nested_journeys: Optional[Mapping[str, Any]] = None,
    options: Optional[RuntimeOptions] = None,
    state_classes: Optional[StateClasses] = None,
) -> str:
    """
    Render a journey map to a Mermaid document.

    Args:
        journey_map: Journey map document (not modified)
        nested_journeys: Nested journey registry (not modified)
        options: Runtime toggles
        state_classes: Initial/error/failure state classes

    Returns:
        Mermaid flowchart string
    """
    return run_render(journey_map, nested_journeys, options, state_classes)["diagram"]
