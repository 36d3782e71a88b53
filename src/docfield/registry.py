"""Field-type registries consulted by the metadata classifier.

A registry answers one question: is ``name`` a metadata field? The static
registry answers from a fixed set; the DuckDB registry answers from a
versioned ``field_types`` table so that nodes running different versions can
disagree about a name without either one being wrong.
"""
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

# Dynamic DuckDB import for pyright compatibility
_duckdb_mod = importlib.import_module("duckdb")

log = logging.getLogger(__name__)

FIELD_TYPES_TABLE = "field_types"

STANDARD_METADATA_FIELDS: frozenset[str] = frozenset({
    "_source", "_field_names", "_version", "_seq_no", "_primary_term",
    "_uid", "_parent", "_all", "_nested_path",
})


class RegistrySchemaError(RuntimeError):
    """Raised when a registry DB does not contain the field_types table."""


class FieldTypeRegistry(Protocol):
    def is_metadata_field(self, name: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class StaticFieldRegistry:
    """Registry backed by an immutable set of metadata field names."""

    names: frozenset[str] = STANDARD_METADATA_FIELDS

    def is_metadata_field(self, name: str) -> bool:
        return name in self.names


def create_field_types_table(conn: Any) -> None:
    """Create the ``field_types`` table on an open DuckDB connection."""
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {FIELD_TYPES_TABLE} (
            name VARCHAR NOT NULL,
            is_metadata BOOLEAN NOT NULL,
            min_version INTEGER,
            max_version INTEGER
        )
        """
    )


def register_field_type(
    conn: Any,
    name: str,
    *,
    is_metadata: bool = True,
    min_version: int | None = None,
    max_version: int | None = None,
) -> None:
    """Insert one classification row. ``None`` bounds are open-ended."""
    if not name:
        raise ValueError("field type name cannot be empty")
    if min_version is not None and max_version is not None and max_version < min_version:
        raise ValueError(
            f"max_version must be >= min_version, got {max_version} < {min_version}",
        )
    conn.execute(
        f"INSERT INTO {FIELD_TYPES_TABLE} VALUES (?, ?, ?, ?)",
        [name, is_metadata, min_version, max_version],
    )


@dataclass(frozen=True, slots=True)
class DuckDbFieldRegistry:
    """Versioned registry stored in a DuckDB file.

    A name is metadata for ``version`` when some row for that name has
    ``is_metadata`` set and ``min_version <= version <= max_version``.
    Each lookup opens its own read-only connection.
    """

    db_path: Path
    version: int

    def is_metadata_field(self, name: str) -> bool:
        conn = _duckdb_mod.connect(str(self.db_path), read_only=True)
        try:
            existing = {
                str(r[0]) for r in conn.execute("SHOW TABLES").fetchall()
            }
            if FIELD_TYPES_TABLE not in existing:
                raise RegistrySchemaError(
                    f"{self.db_path} has no {FIELD_TYPES_TABLE} table",
                )
            row = conn.execute(
                f"""
                SELECT bool_or(is_metadata)
                FROM {FIELD_TYPES_TABLE}
                WHERE name = ?
                  AND (min_version IS NULL OR min_version <= ?)
                  AND (max_version IS NULL OR max_version >= ?)
                """,
                [name, self.version, self.version],
            ).fetchone()
        finally:
            conn.close()
        result = bool(row[0]) if row and row[0] is not None else False
        log.debug("registry %s v%d: %s -> %s", self.db_path, self.version, name, result)
        return result
