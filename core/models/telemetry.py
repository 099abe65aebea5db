# ============================================================================
# TELEMETRY MODELS
# ============================================================================
# STATUS: Core model - Application Insights query envelope and records
# PURPOSE: Pydantic models for query results and decoded rows
# CREATED: 19 OCT 2026
# EXPORTS: QueryResult, QueryTable, QueryColumn, FunctionInvocation, InvocationTrace, InvocationCounts
# DEPENDENCIES: pydantic
# ============================================================================
"""
Telemetry Models

Two layers:
- The query envelope (QueryResult -> tables -> columns/rows) exactly as
  Application Insights returns it. Cells are left as raw JSON values.
- Typed records decoded from rows by core.tabular. Each field's alias is
  the source column name; every field has a zero-value default.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from core.contracts import SeverityLevel

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ============================================================================
# QUERY ENVELOPE
# ============================================================================

class QueryColumn(BaseModel):
    name: str = ""
    type: str = ""

    model_config = {"extra": "ignore"}


class QueryTable(BaseModel):
    """One result table. Rows are positional; arity is not guaranteed."""

    name: str = ""
    columns: List[QueryColumn] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("columns", "rows", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return v if v is not None else []


class QueryResult(BaseModel):
    """Top-level query response."""

    tables: List[QueryTable] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("tables", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return v if v is not None else []


# ============================================================================
# DECODED RECORDS
# ============================================================================

_RECORD = {"populate_by_name": True, "frozen": True}


class FunctionInvocation(BaseModel):
    """One row of the `requests` table for a function."""

    timestamp: datetime = Field(default=EPOCH, alias="timestamp")
    success: bool = Field(default=False, alias="success")
    result_code: str = Field(default="", alias="resultCode")
    duration_ms: float = Field(default=0.0, alias="durationInMilliSeconds")
    invocation_id: str = Field(default="", alias="invocationId")
    operation_id: str = Field(default="", alias="operationId")
    operation_name: str = Field(default="", alias="operationName")

    model_config = _RECORD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "resultCode": self.result_code,
            "durationMs": self.duration_ms,
            "invocationId": self.invocation_id,
            "operationId": self.operation_id,
        }


class InvocationTrace(BaseModel):
    """One row of the `traces` table for an operation."""

    timestamp: datetime = Field(default=EPOCH, alias="timestamp")
    message: str = Field(default="", alias="message")
    severity_level: int = Field(default=0, alias="severityLevel")

    model_config = _RECORD

    @property
    def severity_label(self) -> str:
        return SeverityLevel.label_for(self.severity_level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "severityLevel": self.severity_level,
            "severityLabel": self.severity_label,
        }


class InvocationCounts(BaseModel):
    """Aggregate success/failure counts for a function."""

    total: int = Field(default=0, alias="total")
    failed: int = Field(default=0, alias="failed")
    succeeded: int = Field(default=0, alias="succeeded")

    model_config = _RECORD

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "failed": self.failed, "succeeded": self.succeeded}


__all__ = [
    "EPOCH",
    "QueryColumn",
    "QueryTable",
    "QueryResult",
    "FunctionInvocation",
    "InvocationTrace",
    "InvocationCounts",
]
