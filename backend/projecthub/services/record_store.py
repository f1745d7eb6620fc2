"""Record store — schema-driven CRUD over live PostgreSQL tables.

Statements are built from the live catalog: table names must be plain
identifiers, column names must exist in the table, identifiers are quoted
and values are always bound. Every insert and update is checked against the
table's enum catalog first.

Values are bound as text and cast to the column's type in SQL, so JSON
payloads (strings for dates, numbers for numerics) round-trip without
per-type conversion in Python.
"""

import json
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.core.metrics import record_mutations_total
from projecthub.schemas.schema import ColumnInfo
from projecthub.services.enum_validator import ValidationResult, validate_enum_fields
from projecthub.services.errors import (
    EmptyPayloadError,
    EnumValidationError,
    RecordNotFound,
    UnknownColumnError,
)
from projecthub.services.schema_catalog import (
    SchemaCatalog,
    is_valid_identifier,
    quote_identifier,
    require_table_name,
)

logger = structlog.stdlib.get_logger(__name__)

TEXT_DATA_TYPES = ("character varying", "text", "character")

# Elements containing these (or whitespace) are double-quoted in array literals
_ARRAY_QUOTED_CHARS = frozenset('{},"\\')


@dataclass
class RecordPage:
    rows: list[dict[str, Any]]
    count: int
    limit: int
    offset: int
    count_estimated: bool = False


def _array_element(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, (list, tuple)):
        return array_literal(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        value = json.dumps(value)
    text_value = str(value)
    if (
        text_value == ""
        or text_value.upper() == "NULL"
        or any(ch in _ARRAY_QUOTED_CHARS or ch.isspace() for ch in text_value)
    ):
        escaped = text_value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text_value


def array_literal(values: list[Any] | tuple[Any, ...]) -> str:
    """PostgreSQL array input syntax, e.g. ``["a", "b c"]`` -> ``{a,"b c"}``."""
    return "{" + ",".join(_array_element(v) for v in values) + "}"


def to_text_param(value: Any, column: ColumnInfo | None = None) -> str | None:
    """Render a JSON value as the text Postgres will cast to the column type.

    Lists bound for ARRAY columns use array input syntax; other lists and
    objects are sent as JSON text (json and jsonb columns).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)) and column is not None and column.data_type == "ARRAY":
        return array_literal(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def cast_param(param: str, column: ColumnInfo | None) -> str:
    """SQL fragment binding ``:param`` as text cast to the column's type."""
    if column is None or not is_valid_identifier(column.udt_name):
        return f":{param}"
    return f"CAST(CAST(:{param} AS text) AS {quote_identifier(column.udt_name)})"


class RecordStore:
    def __init__(
        self,
        db: AsyncSession,
        catalog: SchemaCatalog,
        max_page_limit: int = 1000,
    ):
        self._db = db
        self._catalog = catalog
        self._max_page_limit = max_page_limit

    async def validate(self, table_name: str, data: dict[str, Any]) -> ValidationResult:
        """Run the enum validator for ``table_name`` without writing."""
        require_table_name(table_name)
        return await validate_enum_fields(table_name, data, self._catalog.get_enum_map)

    async def list_records(
        self,
        table_name: str,
        limit: int = 100,
        offset: int = 0,
        q: str | None = None,
        fast_count: bool = False,
    ) -> RecordPage:
        """Page through a table ordered by its primary key.

        ``q`` searches every text column with ILIKE. ``fast_count`` swaps the
        exact count for the planner's reltuples estimate.
        """
        require_table_name(table_name)
        limit = max(1, min(limit, self._max_page_limit))
        offset = max(0, offset)
        table = quote_identifier(table_name)

        where = ""
        params: dict[str, Any] = {}
        if q:
            columns = await self._catalog.get_columns(table_name)
            text_columns = [
                c.column_name for c in columns if c.data_type in TEXT_DATA_TYPES
            ]
            if text_columns:
                clauses = " OR ".join(
                    f"{quote_identifier(c)} ILIKE :q" for c in text_columns
                )
                where = f"WHERE ({clauses})"
                params["q"] = f"%{q}%"

        pk = await self._catalog.get_primary_key(table_name)
        order_by = f"ORDER BY {quote_identifier(pk)} ASC" if pk else ""

        result = await self._db.execute(
            text(f"SELECT * FROM {table} {where} {order_by} LIMIT :limit OFFSET :offset"),
            {**params, "limit": limit, "offset": offset},
        )
        rows = [dict(row) for row in result.mappings().all()]

        if fast_count:
            count_result = await self._db.execute(
                text(
                    "SELECT reltuples::bigint AS estimate FROM pg_class "
                    "WHERE oid = to_regclass(:qualified)"
                ),
                {"qualified": f"public.{table_name}"},
            )
            count = int(count_result.scalar() or 0)
        else:
            count_result = await self._db.execute(
                text(f"SELECT COUNT(*) FROM {table} {where}"), params
            )
            count = int(count_result.scalar_one())

        return RecordPage(
            rows=rows,
            count=count,
            limit=limit,
            offset=offset,
            count_estimated=fast_count,
        )

    async def get(
        self, table_name: str, record_id: str, primary_key: str | None = None
    ) -> dict[str, Any]:
        require_table_name(table_name)
        pk, columns = await self._key_and_columns(table_name, primary_key)
        result = await self._db.execute(
            text(
                f"SELECT * FROM {quote_identifier(table_name)} "
                f"WHERE {quote_identifier(pk)} = {cast_param('record_id', columns.get(pk))}"
            ),
            {"record_id": str(record_id)},
        )
        row = result.mappings().first()
        if row is None:
            raise RecordNotFound("Record not found")
        return dict(row)

    async def insert(self, table_name: str, data: dict[str, Any]) -> dict[str, Any]:
        require_table_name(table_name)
        if not data:
            raise EmptyPayloadError("No data provided")
        columns = await self._guard_write(table_name, data)

        names = list(data)
        params = {
            f"v{i}": to_text_param(data[name], columns.get(name))
            for i, name in enumerate(names)
        }
        column_sql = ", ".join(quote_identifier(n) for n in names)
        value_sql = ", ".join(
            cast_param(f"v{i}", columns.get(name)) for i, name in enumerate(names)
        )

        result = await self._db.execute(
            text(
                f"INSERT INTO {quote_identifier(table_name)} ({column_sql}) "
                f"VALUES ({value_sql}) RETURNING *"
            ),
            params,
        )
        row = dict(result.mappings().one())
        await self._db.commit()

        record_mutations_total.labels(table=table_name, operation="insert").inc()
        logger.info("record_inserted", table=table_name, columns=names)
        return row

    async def update(
        self,
        table_name: str,
        record_id: str,
        data: dict[str, Any],
        primary_key: str | None = None,
    ) -> dict[str, Any]:
        require_table_name(table_name)
        if not data:
            raise EmptyPayloadError("No updatable fields provided")
        columns = await self._guard_write(table_name, data)
        pk, _ = await self._key_and_columns(table_name, primary_key, columns)

        names = list(data)
        params: dict[str, Any] = {
            f"v{i}": to_text_param(data[name], columns.get(name))
            for i, name in enumerate(names)
        }
        params["record_id"] = str(record_id)
        set_sql = ", ".join(
            f"{quote_identifier(name)} = {cast_param(f'v{i}', columns.get(name))}"
            for i, name in enumerate(names)
        )

        result = await self._db.execute(
            text(
                f"UPDATE {quote_identifier(table_name)} SET {set_sql} "
                f"WHERE {quote_identifier(pk)} = {cast_param('record_id', columns.get(pk))} "
                "RETURNING *"
            ),
            params,
        )
        row = result.mappings().first()
        if row is None:
            await self._db.rollback()
            raise RecordNotFound("Record not found")
        await self._db.commit()

        record_mutations_total.labels(table=table_name, operation="update").inc()
        logger.info("record_updated", table=table_name, record_id=str(record_id), columns=names)
        return dict(row)

    async def delete(
        self,
        table_name: str,
        record_id: str,
        primary_key: str | None = None,
    ) -> None:
        require_table_name(table_name)
        pk, columns = await self._key_and_columns(table_name, primary_key)

        result = await self._db.execute(
            text(
                f"DELETE FROM {quote_identifier(table_name)} "
                f"WHERE {quote_identifier(pk)} = {cast_param('record_id', columns.get(pk))} "
                "RETURNING 1"
            ),
            {"record_id": str(record_id)},
        )
        if result.first() is None:
            await self._db.rollback()
            raise RecordNotFound("Record not found")
        await self._db.commit()

        record_mutations_total.labels(table=table_name, operation="delete").inc()
        logger.info("record_deleted", table=table_name, record_id=str(record_id))

    async def _guard_write(
        self, table_name: str, data: dict[str, Any]
    ) -> dict[str, ColumnInfo]:
        """Enum-check and column-check a write payload.

        Returns the table's columns keyed by name.
        """
        result = await self.validate(table_name, data)
        if not result.valid:
            logger.info("enum_validation_failed", table=table_name, errors=result.errors)
            raise EnumValidationError(table_name, result.errors)

        columns = {c.column_name: c for c in await self._catalog.get_columns(table_name)}
        unknown = [name for name in data if name not in columns]
        if unknown:
            raise UnknownColumnError(table_name, unknown)
        return columns

    async def _key_and_columns(
        self,
        table_name: str,
        primary_key: str | None,
        columns: dict[str, ColumnInfo] | None = None,
    ) -> tuple[str, dict[str, ColumnInfo]]:
        pk = await self._catalog.get_primary_key(table_name) or primary_key or "id"
        if columns is None:
            columns = {
                c.column_name: c for c in await self._catalog.get_columns(table_name)
            }
        return pk, columns
