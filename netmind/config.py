import os
from typing import Callable, Dict, Mapping, Optional

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_API_VERSION = "2023-06-01"


class AgentConfig:
    """
    Central configuration object for agent behavior.
    Controls the model, loop bounds, memory compaction, retries and
    session retention.
    """

    def __init__(
        self,
        model: str = "claude-sonnet-4-6",
        max_tokens: int = 8192,
        max_iterations: int = 15,
        max_parallel_tools: int = 5,
        memory_summary_threshold: int = 30,
        memory_keep_recent: int = 20,
        session_ttl_seconds: int = 3600,
        max_retries: int = 3,
        backoff_base_seconds: float = 1.0,
        backoff_max_seconds: float = 8.0,
        api_url: str = DEFAULT_API_URL,
        api_version: str = DEFAULT_API_VERSION,
        request_timeout_seconds: float = 120,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.max_iterations = max_iterations
        self.max_parallel_tools = max_parallel_tools
        self.memory_summary_threshold = memory_summary_threshold
        self.memory_keep_recent = memory_keep_recent
        self.session_ttl_seconds = session_ttl_seconds
        self.max_retries = max_retries
        self.backoff_base_seconds = backoff_base_seconds
        self.backoff_max_seconds = backoff_max_seconds
        self.api_url = api_url
        self.api_version = api_version
        self.request_timeout_seconds = request_timeout_seconds

        self._validate()

    def _validate(self):
        if not self.model:
            raise ValueError("model must be a non-empty string")

        for name in (
            "max_tokens",
            "max_iterations",
            "max_parallel_tools",
            "memory_summary_threshold",
            "memory_keep_recent",
            "session_ttl_seconds",
            "request_timeout_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")

        if self.backoff_base_seconds < 0 or self.backoff_max_seconds < 0:
            raise ValueError("backoff delays cannot be negative")

        if self.memory_keep_recent >= self.memory_summary_threshold:
            raise ValueError(
                "memory_keep_recent must be smaller than memory_summary_threshold"
            )

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    _ENV: Dict[str, Callable[[str], object]] = {
        "model": str,
        "max_tokens": int,
        "max_iterations": int,
        "max_parallel_tools": int,
        "memory_summary_threshold": int,
        "memory_keep_recent": int,
        "session_ttl_seconds": int,
        "max_retries": int,
        "backoff_base_seconds": float,
        "backoff_max_seconds": float,
        "api_url": str,
        "api_version": str,
        "request_timeout_seconds": float,
    }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        """
        Build from NETMIND_<FIELD> variables (e.g. NETMIND_MAX_ITERATIONS).
        Unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        overrides = {}

        for name, cast in cls._ENV.items():
            raw = environ.get(f"NETMIND_{name.upper()}")
            if raw is None or raw == "":
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError:
                raise ValueError(f"NETMIND_{name.upper()} is not a valid {cast.__name__}: {raw!r}") from None

        return cls(**overrides)

    def __repr__(self) -> str:
        return (
            f"AgentConfig(model={self.model!r}, max_iterations={self.max_iterations}, "
            f"max_parallel_tools={self.max_parallel_tools}, max_retries={self.max_retries})"
        )
