# ============================================================================
# REQUEST MODELS
# ============================================================================
# STATUS: Core model - Upstream request bodies
# PURPOSE: Validate batched enable/disable requests
# CREATED: 19 OCT 2026
# EXPORTS: FunctionsUpdateRequest
# DEPENDENCIES: pydantic
# ============================================================================
"""
Request Models

Bodies accepted by the upstream-facing operations.
"""

from typing import Any, List

from pydantic import BaseModel, Field, field_validator


class FunctionsUpdateRequest(BaseModel):
    """
    Batched enable/disable request.

    A name present in both lists ends up enabled.
    """

    disable: List[str] = Field(default_factory=list, description="Function names to disable")
    enable: List[str] = Field(default_factory=list, description="Function names to enable")

    model_config = {
        "extra": "ignore",
        "json_schema_extra": {
            "example": {"disable": ["TimerCleanup"], "enable": ["HttpIngest"]}
        },
    }

    @field_validator("disable", "enable", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return v if v is not None else []

    @field_validator("disable", "enable")
    @classmethod
    def _no_blank_names(cls, v: List[str]) -> List[str]:
        if any(not name.strip() for name in v):
            raise ValueError("function names must be non-empty")
        return v

    @property
    def is_empty(self) -> bool:
        return not self.disable and not self.enable

    @property
    def total(self) -> int:
        return len(self.disable) + len(self.enable)


__all__ = ["FunctionsUpdateRequest"]
