"""
Parsed view over a tool call's arguments.

Models frequently send every argument as a string, so the typed accessors
coerce leniently and fall back to the supplied default on unparsable values.
"""

import json
from typing import Any

from ..exceptions import ToolParameterError


class ToolParameters:
    """Typed accessors over the key/value arguments of one tool call."""

    def __init__(self, arguments: dict[str, Any] | str | None = None):
        """
        Args:
            arguments: Structured arguments, or their JSON serialization

        Raises:
            ToolParameterError: If the serialized form is not a JSON object
        """
        self._values = self._parse(arguments)

    @staticmethod
    def _parse(arguments: dict[str, Any] | str | None) -> dict[str, Any]:
        if arguments is None:
            return {}
        if isinstance(arguments, dict):
            return dict(arguments)

        text = arguments.strip()
        if not text:
            return {}
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise ToolParameterError(f"Malformed tool arguments: {e.msg}") from e
        if not isinstance(parsed, dict):
            raise ToolParameterError(
                f"Tool arguments must be a JSON object, got {type(parsed).__name__}"
            )
        return parsed

    def has(self, key: str) -> bool:
        return key in self._values and self._values[key] is not None

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def get_string(self, key: str, default: str = "") -> str:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False) if isinstance(value, (dict, list)) else str(value)

    def require_string(self, key: str) -> str:
        value = self.get_string(key)
        if not value.strip():
            raise ToolParameterError(f"Missing required parameter: {key}")
        return value

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._values.get(key)
        if isinstance(value, bool) or value is None:
            return default
        try:
            return int(str(value).strip())
        except ValueError:
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self._values.get(key)
        if isinstance(value, bool) or value is None:
            return default
        try:
            return float(str(value).strip())
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "1", "yes"):
                return True
            if lowered in ("false", "0", "no"):
                return False
        return default

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return f"ToolParameters({self._values!r})"
