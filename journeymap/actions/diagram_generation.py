"""
Deterministic diagram generation for journey map visualization.

Generates Mermaid flowcharts from a normalized journey map and the states and
transitions selected by traversal or orphan detection.
"""

import base64
import json
from pathlib import Path
from typing import Any, Optional

from journeymap.state.render_state import StateClasses


# These styles should be kept in sync with the key shown by the diagram host
MERMAID_HEADER = """graph LR
    classDef process fill:#ffa,stroke:#000;
    classDef page fill:#ae8,stroke:#000;
    classDef error_page fill:#f99,stroke:#000;
    classDef cri fill:#faf,stroke:#000;
    classDef other fill:#f3f2f1,stroke:#000;"""

# Mermaid line break inside a node or edge label
LABEL_BREAK = "\\n"


def encode_click_payload(response: Optional[dict[str, Any]]) -> str:
    """
    Serialize a state's response to Base64-encoded JSON.

    Base64 avoids escaping issues inside the Mermaid click directive.
    """
    payload = json.dumps(response or {}, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_click_payload(encoded: str) -> dict[str, Any]:
    """Inverse of encode_click_payload."""
    return json.loads(base64.b64decode(encoded).decode("utf-8"))


def render_state(state: str, definition: dict[str, Any], state_classes: StateClasses) -> str:
    """
    Render one node declaration, styled by response type.

    Types:
    - process: rounded node labelled with the lambda
    - page: rectangle labelled with the page ID (error_page for failure states)
    - cri: stadium labelled with the CRI ID and optional context/scope
    - error: bare node styled as an error page
    - anything else: bare node styled as other

    Args:
        state: State ID
        definition: Normalized state definition (may be empty)
        state_classes: Used to pick out failure pages

    Returns:
        Mermaid node line
    """
    response = definition.get("response") or {}
    response_type = response.get("type")

    if response_type == "process":
        return f"    {state}({state}{LABEL_BREAK}{response.get('lambda') or ''}):::process"

    if response_type == "page":
        style = "error_page" if state in state_classes.failure_states else "page"
        return f"    {state}[{state}{LABEL_BREAK}{response.get('pageId') or ''}]:::{style}"

    if response_type == "cri":
        context_info = f"{LABEL_BREAK} context: {response['context']}" if response.get("context") else ""
        scope_info = f"{LABEL_BREAK} scope: {response['scope']}" if response.get("scope") else ""
        return f"    {state}([{state}{LABEL_BREAK}{response.get('criId') or ''}{context_info}{scope_info}]):::cri"

    if response_type == "error":
        return f"    {state}:::error_page"

    return f"    {state}:::other"


def render_click_handler(state: str, definition: dict[str, Any]) -> str:
    """Render the click directive carrying the state's response metadata."""
    payload = encode_click_payload(definition.get("response"))
    return f"    click {state} call onStateClick({json.dumps(state)}, {payload})"


def render_states(journey_map: dict[str, Any], states: list[str], state_classes: StateClasses) -> str:
    """Render node and click lines for each state, in the given order."""
    lines = []
    for state in states:
        definition = journey_map.get(state) or {}
        lines.append(render_state(state, definition, state_classes))
        lines.append(render_click_handler(state, definition))
    return "\n".join(lines)


def render_transitions(transitions: list[tuple[str, str, list[str]]]) -> str:
    """Render one labelled arrow per grouped transition."""
    return "\n".join(
        f"    {source}-->|{LABEL_BREAK.join(event_names)}|{target}"
        for source, target, event_names in transitions
    )


def build_journey_mermaid(
    journey_map: dict[str, Any],
    states: list[str],
    transitions: list[tuple[str, str, list[str]]],
    state_classes: Optional[StateClasses] = None,
) -> str:
    """
    Generate the Mermaid document for a journey map.

    Args:
        journey_map: Normalized journey map
        states: States to draw, in order
        transitions: Grouped transitions (empty in orphan mode)
        state_classes: State classes (defaults to the IPV journey classes)

    Returns:
        Mermaid flowchart string
    """
    state_classes = state_classes or StateClasses()
    states_mermaid = render_states(journey_map, states, state_classes)
    transitions_mermaid = render_transitions(transitions)
    return f"{MERMAID_HEADER}\n{states_mermaid}\n{transitions_mermaid}\n"


def write_mermaid_artifact(file_path: str, content: str) -> None:
    """
    Write Mermaid content to a file, creating directories if needed.

    Args:
        file_path: Path to write to (e.g., "artifacts/journey_map.mmd")
        content: Mermaid diagram content
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
