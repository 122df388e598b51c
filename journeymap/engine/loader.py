"""
Journey map loader: reads journey maps and nested journey registries from
JSON or YAML documents.

Mapping order is preserved as written, which the renderer relies on.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from journeymap.engine.errors import JourneyMapError


SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml")


class JourneyMapLoader:
    """Load and cache journey map documents."""

    def __init__(self):
        self._cache: dict[Path, dict[str, Any]] = {}

    def load_document(self, path: str | Path) -> dict[str, Any]:
        """
        Load a single JSON or YAML mapping document.

        Args:
            path: Document path

        Returns:
            Parsed mapping

        Raises:
            JourneyMapError: If the file is missing, unsupported, invalid or
                not a mapping
        """
        path = Path(path)
        if path in self._cache:
            return self._cache[path]

        if not path.is_file():
            raise JourneyMapError(f"Journey map file not found: {path}")
        if path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise JourneyMapError(f"Unsupported journey map format: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    document = json.load(f)
                else:
                    document = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
            raise JourneyMapError(f"Invalid document {path}: {e}")
        except OSError as e:
            raise JourneyMapError(f"Cannot read document {path}: {e}")

        if not isinstance(document, dict):
            raise JourneyMapError(f"Expected a mapping at the top of {path}")

        self._cache[path] = document
        return document

    def load_journey_map(self, path: str | Path) -> dict[str, Any]:
        """Load a journey map (state ID to state definition)."""
        return self.load_document(path)

    def load_nested_journeys(self, path: str | Path) -> dict[str, Any]:
        """
        Load the nested journey registry.

        A file holds the whole registry. A directory holds one nested journey
        per document, keyed by the file stem.
        """
        path = Path(path)
        if not path.is_dir():
            return self.load_document(path)

        nested_journeys: dict[str, Any] = {}
        for child in sorted(path.iterdir()):
            if child.is_file() and child.suffix.lower() in SUPPORTED_SUFFIXES:
                nested_journeys[child.stem] = self.load_document(child)
        return nested_journeys
