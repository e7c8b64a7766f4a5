"""
Game Database.

Handles loading and validation of static game data (node catalogs,
configuration documents). Every document is checked against a JSON
schema before any model is built from it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema


class DataValidationError(ValueError):
    """A data document could not be read or failed schema validation."""


class Database:
    """
    Read-only access to JSON data documents and their schemas.

    Layout:
        <data_path>/<name>.json
        <data_path>/schemas/<schema>.schema.json
    """

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)

    def load_schemas(self) -> None:
        """Load JSON schemas."""
        schema_dir = self._data_path / "schemas"
        if not schema_dir.exists():
            self.logger.warning(f"Schema directory not found: {schema_dir}")
            return

        for schema_file in schema_dir.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def get_schema(self, schema_name: str) -> dict[str, Any] | None:
        """Get a loaded schema by file name."""
        if not self._schemas:
            self.load_schemas()
        return self._schemas.get(schema_name)

    def load_document(self, path: Path | str, schema_name: str) -> Any:
        """
        Load a JSON document and validate it.

        Args:
            path: Document path; relative paths resolve against the data path
            schema_name: Schema file name, e.g. "node.schema.json"

        Returns:
            The decoded JSON value

        Raises:
            DataValidationError: If the file is unreadable, is not JSON,
                has no schema, or does not match its schema
        """
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self._data_path / file_path

        schema = self.get_schema(schema_name)
        if schema is None:
            self.logger.error(f"No schema found for {file_path.name} ({schema_name})")
            raise DataValidationError(f"Missing schema {schema_name}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to load {file_path}: {e}")
            raise DataValidationError(f"Failed to load {file_path}: {e}") from e

        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.ValidationError as e:
            self.logger.error(f"Validation error in {file_path}: {e.message}")
            raise DataValidationError(f"Validation error in {file_path}: {e.message}") from e

        self.logger.debug(f"Loaded {file_path}")
        return data
