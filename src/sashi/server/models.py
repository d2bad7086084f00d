"""Request and response bodies for the HTTP surface."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workflow: dict[str, Any]
    user_input: dict[str, Any] = Field(default_factory=dict, alias="userInput")
    debug: bool = False


class VerifyRequest(BaseModel):
    workflow: dict[str, Any]


class ConfigValue(BaseModel):
    value: Any


class ToggleResponse(BaseModel):
    name: str
    active: bool


class MetadataResponse(BaseModel):
    name: str
    description: str
    functions: list[dict[str, Any]]


class SanityResponse(BaseModel):
    message: str
    version: Optional[str] = None
