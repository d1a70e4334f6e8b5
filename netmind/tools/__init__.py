from .schema import Tool
from .registry import RegistryError, ToolRegistry
from .validator import ArgumentValidationError, ArgumentValidator
from .executor import ToolExecutor

__all__ = [
    "Tool",
    "RegistryError",
    "ToolRegistry",
    "ArgumentValidationError",
    "ArgumentValidator",
    "ToolExecutor",
]
