"""Schema catalog — discovers table, column, enum and primary-key metadata.

Reads from:
- information_schema.tables / information_schema.columns
- pg_type + pg_enum (enum labels, in enumsortorder)
- pg_index + pg_attribute (primary keys)

Enum maps are cached in Redis. Strictly read-only: never creates or alters
tables or types.
"""

import json
import logging
import re

from redis.asyncio import Redis
from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.core.metrics import cache_operations_total
from projecthub.schemas.schema import ColumnInfo
from projecthub.services.errors import InvalidTableName, UnknownTableError

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "projecthub:enums:"

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z0-9_]+$")

_TABLES_SQL = text(
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = :schema ORDER BY table_name"
)

_COLUMNS_SQL = text(
    "SELECT column_name, data_type, udt_name "
    "FROM information_schema.columns "
    "WHERE table_schema = :schema AND table_name = :table "
    "ORDER BY ordinal_position"
)

_ENUM_LABELS_SQL = text(
    "SELECT t.typname AS type_name, e.enumlabel AS label "
    "FROM pg_type t JOIN pg_enum e ON t.oid = e.enumtypid "
    "WHERE t.typname IN :type_names "
    "ORDER BY t.typname, e.enumsortorder"
).bindparams(bindparam("type_names", expanding=True))

_PRIMARY_KEY_SQL = text(
    "SELECT a.attname AS column_name "
    "FROM pg_index i "
    "JOIN pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey) "
    "WHERE i.indrelid = to_regclass(:qualified) AND i.indisprimary"
)


def is_valid_identifier(name: object) -> bool:
    """True for plain SQL identifiers: letters, digits and underscores only."""
    return isinstance(name, str) and bool(_IDENTIFIER_RE.match(name))


def require_table_name(table_name: str) -> str:
    if not is_valid_identifier(table_name):
        raise InvalidTableName(table_name)
    return table_name


def quote_identifier(name: str) -> str:
    """Double-quote an identifier that already passed is_valid_identifier."""
    return f'"{name}"'


class SchemaCatalog:
    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        cache_ttl: int = 300,
        schema: str = "public",
    ):
        self._db = db
        self._redis = redis
        self._cache_ttl = cache_ttl
        self._schema = schema

    async def list_tables(self) -> list[str]:
        result = await self._db.execute(_TABLES_SQL, {"schema": self._schema})
        return list(result.scalars().all())

    async def get_columns(self, table_name: str) -> list[ColumnInfo]:
        """Return the table's columns in ordinal order.

        Enum columns carry their allowed labels. An unknown table yields an
        empty list rather than an error.
        """
        require_table_name(table_name)
        result = await self._db.execute(
            _COLUMNS_SQL, {"schema": self._schema, "table": table_name}
        )
        rows = result.mappings().all()

        enum_types = [
            row["udt_name"]
            for row in rows
            if row["data_type"] == "USER-DEFINED" and row["udt_name"]
        ]
        labels = await self._enum_labels(enum_types)

        columns: list[ColumnInfo] = []
        for row in rows:
            column = ColumnInfo(
                column_name=row["column_name"],
                data_type=row["data_type"],
                udt_name=row["udt_name"],
            )
            if row["data_type"] == "USER-DEFINED":
                column.enum_values = labels.get(row["udt_name"], [])
            columns.append(column)
        return columns

    async def get_enum_map(
        self, table_name: str, force_refresh: bool = False
    ) -> dict[str, list[str]]:
        """Return column -> allowed labels for every enum column of a table.

        Raises UnknownTableError when the table has no columns at all.
        """
        require_table_name(table_name)
        cache_key = f"{CACHE_KEY_PREFIX}{table_name}"

        if not force_refresh:
            cached = await self._cache_get(cache_key)
            if cached is not None:
                return cached

        columns = await self.get_columns(table_name)
        if not columns:
            raise UnknownTableError(table_name)

        enum_map = {
            c.column_name: c.enum_values
            for c in columns
            if c.enum_values is not None
        }
        await self._cache_set(cache_key, enum_map)
        return enum_map

    async def get_primary_key(self, table_name: str) -> str | None:
        require_table_name(table_name)
        result = await self._db.execute(
            _PRIMARY_KEY_SQL, {"qualified": f"{self._schema}.{table_name}"}
        )
        return result.scalars().first()

    async def _enum_labels(self, type_names: list[str]) -> dict[str, list[str]]:
        if not type_names:
            return {}
        result = await self._db.execute(
            _ENUM_LABELS_SQL, {"type_names": sorted(set(type_names))}
        )
        labels: dict[str, list[str]] = {}
        for row in result.mappings().all():
            labels.setdefault(row["type_name"], []).append(row["label"])
        return labels

    async def _cache_get(self, key: str) -> dict[str, list[str]] | None:
        if self._redis is None:
            return None
        try:
            cached = await self._redis.get(key)
        except Exception:
            # Fail open — a Redis outage falls back to the database
            cache_operations_total.labels(
                cache_type="enum", operation="get", status="error"
            ).inc()
            logger.warning("Enum cache read failed for %s", key, exc_info=True)
            return None
        if cached:
            cache_operations_total.labels(
                cache_type="enum", operation="get", status="hit"
            ).inc()
            return json.loads(cached)
        cache_operations_total.labels(
            cache_type="enum", operation="get", status="miss"
        ).inc()
        return None

    async def _cache_set(self, key: str, enum_map: dict[str, list[str]]) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.setex(key, self._cache_ttl, json.dumps(enum_map))
            cache_operations_total.labels(
                cache_type="enum", operation="set", status="ok"
            ).inc()
        except Exception:
            cache_operations_total.labels(
                cache_type="enum", operation="set", status="error"
            ).inc()
            logger.warning("Enum cache write failed for %s", key, exc_info=True)
