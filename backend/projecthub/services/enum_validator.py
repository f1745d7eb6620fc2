"""Enum validator — checks record values against a table's enum catalog.

The catalog comes from an injected async lookup (normally
SchemaCatalog.get_enum_map). Lookup failures are not caught here.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from projecthub.core.metrics import enum_validations_total

EnumLookup = Callable[[str], Awaitable[Mapping[str, Sequence[str]]]]


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def stringify_value(value: Any) -> str:
    """Render a candidate value the way enum labels are written.

    Booleans become ``true``/``false`` and integral floats drop their
    fractional part, so ``1``, ``1.0`` and ``"1"`` all compare equal.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def check_enum_fields(
    enum_map: Mapping[str, Sequence[Any]], data: Mapping[str, Any]
) -> list[str]:
    """Return one error message per field whose value is not allowed.

    Fields missing from the catalog, or with an empty or non-list entry,
    are unconstrained. ``None`` always passes.
    """
    errors: list[str] = []
    for name, value in data.items():
        if value is None:
            continue
        allowed = enum_map.get(name)
        if not isinstance(allowed, (list, tuple)) or not allowed:
            continue
        rendered = stringify_value(value)
        allowed_text = [stringify_value(a) for a in allowed]
        if rendered not in allowed_text:
            errors.append(
                f"Invalid value for {name}: {rendered}. "
                f"Allowed values: {', '.join(allowed_text)}"
            )
    return errors


async def validate_enum_fields(
    table_name: str, data: Mapping[str, Any], lookup: EnumLookup
) -> ValidationResult:
    """Validate ``data`` against the enum catalog of ``table_name``."""
    enum_map = await lookup(table_name)
    errors = check_enum_fields(enum_map, data)
    enum_validations_total.labels(
        table=table_name, result="invalid" if errors else "valid"
    ).inc()
    return ValidationResult(valid=not errors, errors=errors)
