# ============================================================================
# CONTAINER APP RESOURCE MODELS
# ============================================================================
# STATUS: Core model - Typed read-only projections of ARM documents
# PURPOSE: Pydantic models for Container Apps and their functions
# CREATED: 19 OCT 2026
# EXPORTS: AppResource, EnvironmentVariable, ContainerAppFunction, ContainerAppFunctionCollection
# DEPENDENCIES: pydantic
# ============================================================================
"""
Container App Resource Models

Typed projections of the ARM Container App resource and its functions.

Key Design:
- Read-only view: these models are never sent back to ARM
- Unknown fields are ignored, missing fields default
- The read-modify-write path works on the raw JSON dict instead
  (see services/reconciler.py) so fields not modelled here survive a PATCH
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from core.contracts import ProvisioningState


_TOLERANT = {"populate_by_name": True, "extra": "ignore", "frozen": True}


class EnvironmentVariable(BaseModel):
    """Name/value pair in a container's env list."""

    name: str = ""
    value: Optional[str] = None
    secret_ref: Optional[str] = Field(default=None, alias="secretRef")

    model_config = _TOLERANT


class Container(BaseModel):
    """One container of the app template."""

    name: str = ""
    image: str = ""
    env: Optional[List[EnvironmentVariable]] = None

    model_config = _TOLERANT

    def get_env(self, name: str) -> Optional[EnvironmentVariable]:
        for var in self.env or []:
            if var.name == name:
                return var
        return None


class Template(BaseModel):
    """Deployment template: containers plus revision suffix."""

    containers: List[Container] = Field(default_factory=list)
    revision_suffix: Optional[str] = Field(default=None, alias="revisionSuffix")

    model_config = _TOLERANT

    @field_validator("containers", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return v if v is not None else []


class AppProperties(BaseModel):
    """The `properties` section of the Container App resource."""

    provisioning_state: Optional[str] = Field(default=None, alias="provisioningState")
    running_status: Optional[str] = Field(default=None, alias="runningStatus")
    latest_revision_name: Optional[str] = Field(default=None, alias="latestRevisionName")
    template: Optional[Template] = None

    model_config = _TOLERANT


class AppResource(BaseModel):
    """
    Point-in-time snapshot of a Container App.

    Fetched fresh for every use; never cached across calls.
    """

    id: str = ""
    name: str = ""
    location: str = ""
    properties: Optional[AppProperties] = None

    model_config = _TOLERANT

    @property
    def provisioning_state(self) -> Optional[str]:
        return self.properties.provisioning_state if self.properties else None

    @property
    def running_status(self) -> Optional[str]:
        return self.properties.running_status if self.properties else None

    @property
    def latest_revision_name(self) -> Optional[str]:
        return self.properties.latest_revision_name if self.properties else None

    @property
    def containers(self) -> List[Container]:
        if self.properties and self.properties.template:
            return self.properties.template.containers
        return []

    @property
    def is_ready(self) -> bool:
        """True when ARM will accept another mutation."""
        return ProvisioningState.is_ready(self.provisioning_state)

    def find_env_value(self, name: str) -> Optional[str]:
        """First value of `name` across all containers."""
        for container in self.containers:
            var = container.get_env(name)
            if var is not None:
                return var.value
        return None


# ============================================================================
# FUNCTIONS
# ============================================================================

class FunctionProperties(BaseModel):
    """Properties of a function hosted in the app."""

    invoke_url_template: Optional[str] = Field(default=None, alias="invokeUrlTemplate")
    trigger_type: Optional[str] = Field(default=None, alias="triggerType")
    language: Optional[str] = None
    is_disabled: bool = Field(default=False, alias="isDisabled")

    model_config = _TOLERANT

    @field_validator("is_disabled", mode="before")
    @classmethod
    def _none_is_enabled(cls, v: Any) -> Any:
        return False if v is None else v


class ContainerAppFunction(BaseModel):
    """A function deployed in the app's latest (or a given) revision."""

    id: str = ""
    raw_name: str = Field(default="", alias="name")
    type: str = ""
    properties: FunctionProperties = Field(default_factory=FunctionProperties)

    model_config = _TOLERANT

    @field_validator("id", "raw_name", "type", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("properties", mode="before")
    @classmethod
    def _none_to_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def name(self) -> str:
        """Function name; ARM sometimes leaves `name` empty, so fall back to the id."""
        if self.raw_name:
            return self.raw_name
        return self.id.rstrip("/").split("/")[-1]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "triggerType": self.properties.trigger_type,
            "language": self.properties.language,
            "isDisabled": self.properties.is_disabled,
            "invokeUrlTemplate": self.properties.invoke_url_template,
        }


class ContainerAppFunctionCollection(BaseModel):
    """List response for functions endpoints."""

    value: List[ContainerAppFunction] = Field(default_factory=list)
    next_link: Optional[str] = Field(default=None, alias="nextLink")

    model_config = _TOLERANT

    @field_validator("value", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return v if v is not None else []


__all__ = [
    "EnvironmentVariable",
    "Container",
    "Template",
    "AppProperties",
    "AppResource",
    "FunctionProperties",
    "ContainerAppFunction",
    "ContainerAppFunctionCollection",
]
