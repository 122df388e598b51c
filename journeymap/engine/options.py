"""
Collect the disabled-CRI and feature flag options referenced by a journey map.

Used to build the option selection form; works on the raw journey map.
"""

from typing import Any

from journeymap.engine.resolver import CHECK_IF_DISABLED, iter_branches


def _add_definition_options(
    definition: dict[str, Any],
    disabled_options: list[str],
    feature_flag_options: list[str],
) -> None:
    for kind, key, branch in iter_branches(definition):
        options = disabled_options if kind == CHECK_IF_DISABLED else feature_flag_options
        if key not in options:
            options.append(key)
        _add_definition_options(branch, disabled_options, feature_flag_options)


def collect_options(journey_map: dict[str, Any]) -> dict[str, list[str]]:
    """
    Traverse the journey map and collect every option key.

    Args:
        journey_map: Raw journey map (not normalized)

    Returns:
        {"disabledOptions": [...], "featureFlagOptions": [...]}, each
        de-duplicated in first-seen order
    """
    disabled_options: list[str] = []
    feature_flag_options: list[str] = []

    for definition in journey_map.values():
        events = definition.get("events") or definition.get("exitEvents") or {}
        for event_definition in events.values():
            _add_definition_options(event_definition, disabled_options, feature_flag_options)

    return {
        "disabledOptions": disabled_options,
        "featureFlagOptions": feature_flag_options,
    }
