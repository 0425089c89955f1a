"""
YAML definition loader with per-path caching.

Usage::

    from verscope.definition.loader import DefinitionLoader

    loader = DefinitionLoader()
    definition = loader.load(Path("petstore.versions.yaml"))

Quote version labels in YAML (``"1.10"``); an unquoted ``1.10`` is read as
the float ``1.1`` before validation sees it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

import yaml

from verscope.definition.schema import SchemaDefinition

logger = logging.getLogger(__name__)


class DefinitionLoader:
    """Loads and caches versioned schema definitions from YAML files."""

    _cache: ClassVar[dict[str, SchemaDefinition]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the definition cache (useful in tests)."""
        cls._cache.clear()

    def load(self, path: Path) -> SchemaDefinition:
        """Load a definition from a YAML file.

        Args:
            path: Path to the YAML definition file.

        Returns:
            Validated ``SchemaDefinition`` instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            TypeError: If the YAML root is not a mapping.
            yaml.YAMLError: If the file contains invalid YAML.
            pydantic.ValidationError: If the YAML does not match the schema.
        """
        key = str(path.resolve())
        if key in self._cache:
            logger.debug("Definition cache hit: %s", key)
            return self._cache[key]

        if not path.exists():
            raise FileNotFoundError(f"Definition file not found: {path}")

        with open(path) as fh:
            raw = yaml.safe_load(fh)

        definition = self._validate(raw, str(path))
        self._cache[key] = definition

        logger.debug(
            "Loaded schema definition: versions=%d, elements=%d",
            len(definition.versions),
            definition.count_elements(),
        )
        return definition

    def load_from_string(self, yaml_str: str) -> SchemaDefinition:
        """Load a definition from a YAML string (convenience for testing).

        Args:
            yaml_str: YAML content as a string.

        Returns:
            Validated ``SchemaDefinition`` instance.
        """
        return self._validate(yaml.safe_load(yaml_str), "<string>")

    @staticmethod
    def _validate(raw: object, source: str) -> SchemaDefinition:
        if not isinstance(raw, dict):
            raise TypeError(
                f"Expected YAML mapping at root of {source}, "
                f"got {type(raw).__name__}"
            )
        return SchemaDefinition.model_validate(raw)
