"""Schema and validation layer for tool parameters.

Input and output shapes are pydantic models. A :class:`Validator` wraps a
model and turns raw transport parameters into a validated instance, or
raises :class:`InvalidParametersError` with a readable diagnostic.
"""

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from todo_mcp.exceptions import InvalidParametersError

ModelT = TypeVar("ModelT", bound=BaseModel)

EMPTY_OBJECT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


class ToolInput(BaseModel):
    """Base class for tool input schemas.

    Fields may be declared in snake_case with camelCase aliases; both
    spellings are accepted. Unknown keys are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a single readable line.

    Args:
        exc: The validation error.

    Returns:
        Diagnostics joined by "; ", each prefixed with its field path.
    """
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


class Validator(Generic[ModelT]):
    """Validates raw parameters against a pydantic model."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def validate(self, raw: Mapping[str, Any] | None, tool: str = "") -> ModelT:
        """Validate raw parameters.

        Args:
            raw: Parameters as received from a transport. None is treated
                as an empty object.
            tool: Tool name used in the error message.

        Returns:
            The validated model instance.

        Raises:
            InvalidParametersError: If validation fails.
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise InvalidParametersError(
                tool, f"expected an object, got {type(raw).__name__}"
            )
        try:
            return self.model.model_validate(dict(raw))
        except ValidationError as e:
            raise InvalidParametersError(tool, format_validation_error(e)) from e

    def json_schema(self) -> dict[str, Any]:
        """Get the JSON Schema of the model, using field aliases."""
        return self.model.model_json_schema(by_alias=True)


def json_schema_for(model: type[BaseModel] | None) -> dict[str, Any] | None:
    """JSON Schema for a model, or None when the tool declares no schema."""
    if model is None:
        return None
    return Validator(model).json_schema()
