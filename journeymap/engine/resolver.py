"""
Conditional event resolution.

An event definition is a small tagged union evaluated one layer at a time:

- checkIfDisabled: first key (in declared order) naming a disabled CRI wins
- checkFeatureFlag: otherwise, first key naming an enabled feature flag wins
- targetState: otherwise, the base target

The chosen branch is itself an event definition, so the walk repeats until a
layer has no matching branch. Disabled checks always take precedence over
feature flag checks at every layer. This must stay in step with the journey
engine's own event resolution.
"""

from typing import Any, Iterator, Optional

from journeymap.state.render_state import RuntimeOptions


CHECK_IF_DISABLED = "checkIfDisabled"
CHECK_FEATURE_FLAG = "checkFeatureFlag"


def _first_match(branches: Optional[dict[str, Any]], enabled: tuple[str, ...]) -> Optional[str]:
    """Return the first branch key (declared order) present in enabled."""
    for key in branches or {}:
        if key in enabled:
            return key
    return None


def resolve_event_target(definition: dict[str, Any], options: RuntimeOptions) -> Optional[str]:
    """
    Resolve the effective target state of an event.

    Args:
        definition: Event definition
        options: Runtime options (disabled CRIs and feature flags)

    Returns:
        Target state ID, or None if the resolved layer has no targetState
    """
    current = definition
    while True:
        disabled = _first_match(current.get(CHECK_IF_DISABLED), options.disabled_cris)
        if disabled is not None:
            current = current[CHECK_IF_DISABLED][disabled]
            continue

        flag = _first_match(current.get(CHECK_FEATURE_FLAG), options.feature_flags)
        if flag is not None:
            current = current[CHECK_FEATURE_FLAG][flag]
            continue

        return current.get("targetState")


def iter_branches(definition: dict[str, Any]) -> Iterator[tuple[str, str, dict[str, Any]]]:
    """
    Yield (check kind, option key, branch definition) for one layer.

    Disabled branches come first, then feature flag branches, each in
    declared order.
    """
    for kind in (CHECK_IF_DISABLED, CHECK_FEATURE_FLAG):
        for key, branch in (definition.get(kind) or {}).items():
            yield kind, key, branch


def all_possible_targets(definition: dict[str, Any]) -> list[Optional[str]]:
    """
    Every target an event could resolve to under any runtime options.

    Includes the base targetState (possibly None) followed by the targets of
    every nested branch, depth first.
    """
    targets = [definition.get("targetState")]
    for _, _, branch in iter_branches(definition):
        targets.extend(all_possible_targets(branch))
    return targets
