"""
NetMind: an LLM agent for network-diagram design.

The agent talks to the model, answers analysis tools in-process and
hands canvas actions back to the caller as a resumable suspension.
"""

from .app import NetMindApp
from .config import AgentConfig

__version__ = "0.1.0"

__all__ = ["NetMindApp", "AgentConfig", "__version__"]
