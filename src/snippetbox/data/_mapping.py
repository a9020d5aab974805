"""Row-to-dataclass mapping with type coercion.

Converts raw database rows (dicts) into typed frozen dataclasses.
Uses dataclass field introspection, no metaclass magic, no descriptors.

Type coercion handles the mismatch between SQLite's storage classes and
Python dataclass annotations. Fields annotated as ``int`` coerce ``"45"``
to ``45``; fields annotated as ``datetime`` parse the ``YYYY-MM-DD HH:MM:SS``
text that ``datetime('now')`` produces and are returned as UTC-aware values.
"""

import dataclasses
import types
from datetime import UTC, datetime
from typing import Any, get_args, get_origin


def _to_datetime(value: Any) -> datetime:
    parsed = datetime.fromisoformat(value) if isinstance(value, str) else value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# Scalar types we know how to coerce from database driver values.
_COERCIBLE: dict[type, Any] = {
    int: lambda v: int(v) if v != "" else 0,
    float: lambda v: float(v) if v != "" else 0.0,
    bool: lambda v: bool(int(v)) if isinstance(v, str) else bool(v),
    str: str,
    datetime: _to_datetime,
}


def _build_coercion_map(cls: type) -> dict[str, type | None]:
    """Build a {field_name: target_type} map for coercible fields.

    Returns ``None`` for fields that don't need coercion.
    """
    result: dict[str, type | None] = {}
    for f in dataclasses.fields(cls):
        annotation = f.type
        # Unwrap Optional (X | None) and coerce to the non-None branch
        origin = get_origin(annotation)
        if origin is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            annotation = args[0] if len(args) == 1 else None
        result[f.name] = annotation if annotation in _COERCIBLE else None
    return result


def _coerce(value: Any, target: type | None) -> Any:
    """Coerce a single value to the target type, if needed."""
    if target is None or value is None:
        return value
    if target is datetime:
        return _to_datetime(value)
    if isinstance(value, target):
        return value
    return _COERCIBLE[target](value)


def _require_dataclass(cls: type) -> None:
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass; snippetbox.data maps rows onto frozen dataclasses"
        raise TypeError(msg)


def map_row[T](cls: type[T], row: dict[str, Any]) -> T:
    """Map a dict-like row to a frozen dataclass instance.

    Only passes keys that match dataclass fields. Extra columns are silently
    ignored (SELECT * is fine even if the dataclass has fewer fields).

    Raises ``TypeError`` if required fields are missing from the row.
    """
    _require_dataclass(cls)
    coercion = _build_coercion_map(cls)
    return cls(**{k: _coerce(v, coercion[k]) for k, v in row.items() if k in coercion})


def map_rows[T](cls: type[T], rows: list[dict[str, Any]]) -> list[T]:
    """Map a list of dict-like rows to frozen dataclass instances."""
    _require_dataclass(cls)
    coercion = _build_coercion_map(cls)
    return [
        cls(**{k: _coerce(v, coercion[k]) for k, v in row.items() if k in coercion})
        for row in rows
    ]
