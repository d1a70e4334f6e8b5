import os
import logging
from typing import Any, Dict, List, Optional

import requests

from ...config import AgentConfig
from .errors import LLMProtocolError, LLMServiceError, TransientLLMError
from .llm_client import LLMClient, LLMResponse

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 503, 529})


class AnthropicClient(LLMClient):

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or AgentConfig()
        self.model = self.config.model
        self.url = self.config.api_url

        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")

        if not self.api_key:
            raise RuntimeError(
                "ANTHROPIC_API_KEY environment variable not set"
            )

        self._session = session or requests.Session()

    def create_message(
        self,
        system: str,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> LLMResponse:

        logger.info(
            "[LLM] Request | model=%s | messages=%d | tools=%d | system_chars=%d",
            self.model,
            len(messages),
            len(tools),
            len(system),
        )

        payload = {
            "model": self.model,
            "max_tokens": self.config.max_tokens,
            "system": [
                {
                    "type": "text",
                    "text": system,
                    "cache_control": {"type": "ephemeral"},
                }
            ],
            "tools": tools,
            "messages": messages,
        }

        try:
            response = self._session.post(
                self.url,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": self.config.api_version,
                    "content-type": "application/json",
                },
                json=payload,
                timeout=self.config.request_timeout_seconds,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            logger.warning("[LLM] Transport failure: %s", e)
            raise TransientLLMError(f"Transport failure: {e}") from e

        if response.status_code in RETRYABLE_STATUSES:
            logger.warning("[LLM] Retryable status %d", response.status_code)
            raise TransientLLMError(
                f"Upstream busy ({response.status_code})",
                status=response.status_code,
                body=response.text,
            )

        if not response.ok:
            logger.error("[LLM] Upstream error %d: %s", response.status_code, response.text[:200])
            raise LLMServiceError(
                f"Upstream error ({response.status_code})",
                status=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LLMProtocolError(
                "Response body is not JSON",
                status=response.status_code,
                body=response.text,
            ) from e

        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list):
            raise LLMProtocolError(
                "Response has no content list",
                status=response.status_code,
                body=response.text,
            )

        result = LLMResponse(
            content=[block for block in content if isinstance(block, dict)],
            stop_reason=data.get("stop_reason"),
            usage=data.get("usage") or {},
        )

        logger.info(
            "[LLM] Response | stop_reason=%s | blocks=%d | usage=%s",
            result.stop_reason,
            len(result.content),
            result.usage,
        )

        return result
