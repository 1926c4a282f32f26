"""
Tool System Data Models

Defines the model-facing description of a tool: its name, natural-language
description and parameter schema. Definitions are built once at startup
from every registered handler and advertised to the model client.
"""

from typing import Any

from pydantic import BaseModel, Field, validator

VALID_PARAMETER_TYPES = {"string", "integer", "number", "boolean", "array", "object"}


class ParameterSchema(BaseModel):
    """Schema of a single named tool parameter"""

    name: str = Field(..., description="Parameter name")
    type: str = Field("string", description="JSON schema type tag")
    description: str = Field("", description="Parameter description")
    required: bool = Field(True, description="Whether parameter is required")

    @validator("type")
    def validate_type(cls, v: str) -> str:
        """Restrict type tags to JSON schema primitives"""
        if v not in VALID_PARAMETER_TYPES:
            raise ValueError(f"Parameter type must be one of {sorted(VALID_PARAMETER_TYPES)}")
        return v


class ToolDefinition(BaseModel):
    """
    Complete model-facing description of a tool.

    Contains everything the model needs to decide whether and how to
    invoke the tool.
    """

    name: str = Field(..., description="Unique tool name")
    description: str = Field(..., description="Tool functionality description")
    parameters: list[ParameterSchema] = Field(
        default_factory=list, description="Parameter definitions"
    )

    @validator("name")
    def validate_name_format(cls, v: str) -> str:
        """Validate tool name follows naming conventions"""
        if not v or not v.strip():
            raise ValueError("Tool name cannot be empty")

        name = v.strip()
        if not name.replace("_", "").replace("-", "").isalnum():
            raise ValueError(
                "Tool name must contain only letters, numbers, underscores and hyphens"
            )
        return name

    @validator("description")
    def validate_description_content(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Tool description cannot be empty")
        return v.strip()

    @property
    def required_parameters(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def to_openai_schema(self) -> dict[str, Any]:
        """Render as an OpenAI function-tool definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        p.name: {"type": p.type, "description": p.description}
                        for p in self.parameters
                    },
                    "required": self.required_parameters,
                },
            },
        }
