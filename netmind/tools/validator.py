from __future__ import annotations

from typing import Any, Dict, List

from .registry import ToolRegistry

SUPPORTED_KEYWORDS = frozenset({
    "type",
    "properties",
    "required",
    "enum",
    "items",
    "additionalProperties",
    "description",
})

SUPPORTED_TYPES = frozenset({"string", "number", "integer", "boolean", "array", "object", "null"})


class ArgumentValidationError(Exception):
    """Raised when tool arguments violate schema."""
    pass


class ArgumentValidator:
    """
    Validates tool arguments against tool input schemas.

    Supports the JSON-schema subset the tool declarations use:
    - required
    - properties.*.type (string, number, integer, boolean, array, object)
    - enum
    - items (arrays) and nested object properties
    - additionalProperties: false
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate(self, tool_name: str, args: Dict[str, Any]) -> Dict[str, Any]:

        schema = self._registry.get_input_schema(tool_name)

        if not isinstance(args, dict):
            raise ArgumentValidationError("Arguments must be a dictionary.")

        self._check_object(schema, args, path="")

        return args

    # ------------------------------------------------------------------
    # Validation Steps
    # ------------------------------------------------------------------

    def _check_object(self, schema: Dict[str, Any], value: Dict[str, Any], path: str) -> None:
        properties = schema.get("properties", {})

        missing = [key for key in schema.get("required", []) if key not in value]
        if missing:
            raise ArgumentValidationError(
                f"Missing required arguments{self._where(path)}: {missing}"
            )

        if schema.get("additionalProperties") is False:
            extra = [key for key in value if key not in properties]
            if extra:
                raise ArgumentValidationError(
                    f"Unknown arguments{self._where(path)}: {extra}"
                )

        for key, sub_schema in properties.items():
            if key in value:
                self._check_value(sub_schema, value[key], self._join(path, key))

    def _check_value(self, schema: Dict[str, Any], value: Any, path: str) -> None:
        expected = schema.get("type")

        if expected and not self._matches_type(expected, value):
            raise ArgumentValidationError(
                f"Argument '{path}' expected type {expected}, got {type(value).__name__}"
            )

        if "enum" in schema and value not in schema["enum"]:
            raise ArgumentValidationError(
                f"Argument '{path}' must be one of {schema['enum']}, got {value!r}"
            )

        if isinstance(value, list) and isinstance(schema.get("items"), dict):
            for index, item in enumerate(value):
                self._check_value(schema["items"], item, f"{path}[{index}]")

        if isinstance(value, dict) and expected == "object":
            self._check_object(schema, value, path)

    # ------------------------------------------------------------------
    # Type Matching
    # ------------------------------------------------------------------

    def _matches_type(self, expected: Any, value: Any) -> bool:

        if isinstance(expected, list):
            return any(self._matches_type(option, value) for option in expected)

        # bool is an int subclass; JSON keeps them apart
        if expected == "boolean":
            return isinstance(value, bool)
        if expected == "integer":
            return isinstance(value, int) and not isinstance(value, bool)
        if expected == "number":
            return isinstance(value, (int, float)) and not isinstance(value, bool)

        mapping = {
            "string": str,
            "array": list,
            "object": dict,
            "null": type(None),
        }

        if expected in mapping:
            return isinstance(value, mapping[expected])

        return True  # reported by unsupported_keywords() at registry build

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _join(path: str, key: str) -> str:
        return f"{path}.{key}" if path else key

    @staticmethod
    def _where(path: str) -> str:
        return f" in '{path}'" if path else ""


def unsupported_keywords(schema: Dict[str, Any], path: str = "") -> List[str]:
    """
    Schema keywords and type names the validator does not enforce.

    Entries read `<path>:<keyword>` or `<path>:type=<name>`; an empty
    list means every constraint in the schema is checked.
    """
    found: List[str] = []
    where = path or "$"

    for keyword in schema:
        if keyword not in SUPPORTED_KEYWORDS:
            found.append(f"{where}:{keyword}")

    types = schema.get("type")
    for name in types if isinstance(types, list) else [types]:
        if name is not None and name not in SUPPORTED_TYPES:
            found.append(f"{where}:type={name}")

    for key, sub_schema in (schema.get("properties") or {}).items():
        if isinstance(sub_schema, dict):
            found += unsupported_keywords(sub_schema, f"{path}.{key}" if path else key)

    if isinstance(schema.get("items"), dict):
        found += unsupported_keywords(schema["items"], f"{where}[]")

    return found
