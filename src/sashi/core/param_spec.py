"""Parameter type descriptors.

A ``ParamSpec`` describes one argument (or the return value) of a registered
function. Specs are frozen pydantic models so they can be shared between
descriptors, the tool feed and the coercion layer without defensive copies.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParamType(str, Enum):
    """Declared type of a function parameter."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"


class ParamSpec(BaseModel):
    """Schema for a single parameter, return value or nested object field.

    Attributes:
        name: Parameter name
        type: Declared type
        description: Human-readable text for the planner
        required: Whether a value must be supplied
        enum_values: Allowed values when ``type`` is ``enum`` (exact match)
        object_schema: Field specs for ``object`` parameters, coerced recursively
        items: Element spec for ``array`` parameters
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: ParamType
    description: str = ""
    required: bool = True
    enum_values: Optional[tuple[str, ...]] = Field(default=None, alias="enumValues")
    object_schema: Optional[tuple["ParamSpec", ...]] = Field(default=None, alias="objectSchema")
    items: Optional["ParamSpec"] = None

    @model_validator(mode="after")
    def _check_enum_values(self) -> "ParamSpec":
        if self.type == ParamType.ENUM and not self.enum_values:
            raise ValueError(f"Enum parameter '{self.name}' must declare at least one enum value")
        return self

    def get_field(self, name: str) -> Optional["ParamSpec"]:
        """Return the nested object field called ``name``, if declared."""
        for spec in self.object_schema or ():
            if spec.name == name:
                return spec
        return None
