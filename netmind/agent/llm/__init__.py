"""
LLM transport layer.

Exposes:
- LLMClient (abstract interface) and LLMResponse
- AnthropicClient (Messages API backend)
- the LLMError taxonomy
"""

from .llm_client import LLMClient, LLMResponse
from .anthropic_client import AnthropicClient
from .errors import LLMError, LLMProtocolError, LLMServiceError, TransientLLMError

__all__ = [
    "LLMClient",
    "LLMResponse",
    "AnthropicClient",
    "LLMError",
    "LLMProtocolError",
    "LLMServiceError",
    "TransientLLMError",
]
