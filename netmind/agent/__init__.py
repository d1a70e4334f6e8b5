from .core import Agent
from .events import AgentEvent

__all__ = ["Agent", "AgentEvent"]
