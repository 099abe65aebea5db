# ============================================================================
# TABULAR DECODER
# ============================================================================
# STATUS: Core - Column-indexed row decoding
# PURPOSE: Turn dynamically-typed query rows into typed records
# CREATED: 19 OCT 2026
# EXPORTS: ColumnIndex, decode_table, coerce_* helpers
# DEPENDENCIES: pydantic
# ============================================================================
"""
Tabular Decoder

Decodes the first table of a QueryResult into pydantic records.

Rules:
- No tables -> empty list
- Columns are matched by name, case-insensitively (index built once per table)
- A missing column or a row shorter than the column list reads as null
- Each field is coerced independently; a malformed cell yields the
  type's zero value, it never fails the row or the page

The target record declares its column names as field aliases and its
coercion rule through the field's annotation (str, bool, int, float,
datetime).
"""

import logging
import math
import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel

from core.models.telemetry import EPOCH, QueryColumn, QueryResult

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

_TRUE_STRINGS = frozenset({"true", "1"})
_FALSE_STRINGS = frozenset({"false", "0"})

# Application Insights emits 7-digit fractions ("...12.1234567Z")
_FRACTION = re.compile(r"\.(\d+)")


# ============================================================================
# CELL COERCION
# ============================================================================

def coerce_str(cell: Any) -> str:
    if cell is None:
        return ""
    if isinstance(cell, bool):
        return "true" if cell else "false"
    return str(cell)


def coerce_bool(cell: Any) -> bool:
    if isinstance(cell, bool):
        return cell
    if isinstance(cell, str):
        text = cell.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return False


def coerce_float(cell: Any) -> float:
    if isinstance(cell, bool):
        return 0.0
    if isinstance(cell, (int, float)):
        return float(cell)
    if isinstance(cell, str):
        try:
            return float(cell.strip())
        except ValueError:
            return 0.0
    return 0.0


def coerce_int(cell: Any) -> int:
    if isinstance(cell, bool):
        return 0
    if isinstance(cell, int):
        return cell
    if isinstance(cell, float):
        return int(cell) if math.isfinite(cell) else 0
    if isinstance(cell, str):
        try:
            return int(cell.strip())
        except ValueError:
            return 0
    return 0


def coerce_datetime(cell: Any) -> datetime:
    if not isinstance(cell, str) or not cell.strip():
        return EPOCH
    text = cell.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


COERCERS: Dict[Any, Callable[[Any], Any]] = {
    str: coerce_str,
    bool: coerce_bool,
    int: coerce_int,
    float: coerce_float,
    datetime: coerce_datetime,
}


# ============================================================================
# COLUMN INDEX
# ============================================================================

class ColumnIndex:
    """Case-insensitive column name -> position map for one table."""

    def __init__(self, columns: Sequence[QueryColumn]):
        self._positions: Dict[str, int] = {}
        for position, column in enumerate(columns):
            self._positions[column.name.lower()] = position

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._positions

    def position(self, name: str) -> Optional[int]:
        return self._positions.get(name.lower())

    def cell(self, row: Sequence[Any], name: str) -> Any:
        """Cell value for `name`, or None when the column or the cell is missing."""
        position = self._positions.get(name.lower())
        if position is None or position >= len(row):
            return None
        return row[position]


# ============================================================================
# DECODING
# ============================================================================

@lru_cache(maxsize=None)
def _field_plan(record_type: Type[BaseModel]) -> Tuple[Tuple[str, str, Callable[[Any], Any]], ...]:
    """(field name, column name, coercer) for every field of the record."""
    plan = []
    for field_name, info in record_type.model_fields.items():
        coercer = COERCERS.get(info.annotation)
        if coercer is None:
            raise TypeError(
                f"{record_type.__name__}.{field_name}: no coercion rule for {info.annotation!r}"
            )
        plan.append((field_name, info.alias or field_name, coercer))
    return tuple(plan)


def decode_row(row: Sequence[Any], index: ColumnIndex, record_type: Type[RecordT]) -> RecordT:
    values = {
        field_name: coercer(index.cell(row, column))
        for field_name, column, coercer in _field_plan(record_type)
    }
    return record_type(**values)


def decode_table(result: QueryResult, record_type: Type[RecordT]) -> List[RecordT]:
    """
    Decode the first table of `result` into `record_type` instances.

    Args:
        result: Parsed query envelope
        record_type: Pydantic model whose aliases name the source columns

    Returns:
        One record per row; empty when the result has no tables.
    """
    if not result.tables:
        return []

    table = result.tables[0]
    index = ColumnIndex(table.columns)

    missing = [column for _, column, _ in _field_plan(record_type) if column not in index]
    if missing:
        logger.debug(f"Table '{table.name}' lacks columns {missing}; defaults will be used")

    return [decode_row(row, index, record_type) for row in table.rows]


__all__ = [
    "ColumnIndex",
    "COERCERS",
    "coerce_str",
    "coerce_bool",
    "coerce_int",
    "coerce_float",
    "coerce_datetime",
    "decode_row",
    "decode_table",
]
