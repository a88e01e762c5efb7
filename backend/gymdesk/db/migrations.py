"""Imperative schema upgrades for databases created by older releases.

``create_all`` never alters existing tables, so on startup every mapped
column that is missing from its table is added with ``ALTER TABLE``.
Each step runs in its own transaction; a failing step is logged and
skipped so a single bad column never blocks startup.
"""

import enum
import logging

from sqlalchemy import Column, inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine

from gymdesk.db.base import Base

logger = logging.getLogger(__name__)

# Role names written by older databases, normalized to the current enum values
LEGACY_ROLE_UPDATES = [
    "UPDATE users SET role = 'reception' WHERE role = 'recepcion'",
    "UPDATE users SET role = 'cashier' WHERE role = 'cajero'",
]


def _scalar_default(column: Column) -> str | None:
    default = column.default
    if default is None or not default.is_scalar:
        return None
    value = default.arg
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return None


def column_ddl(column: Column, dialect) -> str:
    ddl = f'"{column.name}" {column.type.compile(dialect=dialect)}'
    default = _scalar_default(column)
    if default is not None:
        ddl += f" DEFAULT {default}"
        if not column.nullable:
            ddl += " NOT NULL"
    return ddl


def _missing_columns(sync_conn) -> list[tuple[str, Column]]:
    inspector = inspect(sync_conn)
    existing_tables = set(inspector.get_table_names())
    missing = []
    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            continue
        present = {col["name"] for col in inspector.get_columns(table.name)}
        for column in table.columns:
            if column.name not in present:
                missing.append((table.name, column))
    return missing


async def apply_migrations(engine: AsyncEngine) -> list[str]:
    """Add missing columns and normalize legacy data. Returns the statements applied."""
    async with engine.connect() as conn:
        missing = await conn.run_sync(_missing_columns)

    applied = []
    statements = [
        f'ALTER TABLE "{table}" ADD COLUMN {column_ddl(column, engine.dialect)}'
        for table, column in missing
    ]
    for sql in statements + LEGACY_ROLE_UPDATES:
        try:
            async with engine.begin() as conn:
                result = await conn.execute(text(sql))
        except Exception as e:
            logger.warning("Migration skipped (%s): %s", sql[:80], e)
            continue
        if sql.startswith("ALTER") or result.rowcount:
            applied.append(sql)
            logger.info("Migration applied: %s", sql)
    return applied
