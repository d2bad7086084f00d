"""Pydantic models for workflow documents."""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ACTION_ID_PATTERN = r"^[A-Za-z_][A-Za-z0-9_-]*$"
_TOOL_PREFIX = "functions."


class GenerationContext(str, Enum):
    """Expected output shape of a generation or transform call."""

    SQL = "sql"
    MARKDOWN = "markdown"
    JSON = "json"
    GENERAL = "general"


class GenerateDirective(BaseModel):
    """``{"_generate": prompt, "_context": ...}`` parameter value."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., alias="_generate")
    context: GenerationContext = Field(default=GenerationContext.GENERAL, alias="_context")


class TransformDirective(BaseModel):
    """``{"_transform": prompt, "_context": ...}`` post-processing of a result."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., alias="_transform")
    context: GenerationContext = Field(default=GenerationContext.GENERAL, alias="_context")


class WorkflowAction(BaseModel):
    """One step of a workflow, invoking exactly one registered function."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., pattern=ACTION_ID_PATTERN)
    tool: str = Field(..., min_length=1)
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    parameter_metadata: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="parameterMetadata")
    map: bool = False
    transform: Optional[TransformDirective] = Field(default=None, alias="_transform")

    @field_validator("tool")
    @classmethod
    def strip_tool_prefix(cls, v: str) -> str:
        """Planners often emit ``functions.<name>``; the registry key is ``<name>``."""
        if v.startswith(_TOOL_PREFIX):
            return v[len(_TOOL_PREFIX) :]
        return v


class WorkflowDocument(BaseModel):
    """Declarative workflow produced by a planner."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["workflow"] = "workflow"
    description: Optional[str] = None
    actions: list[WorkflowAction] = Field(..., min_length=1)
    ui: Optional[dict[str, Any]] = None

    @property
    def action_ids(self) -> list[str]:
        return [action.id for action in self.actions]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
