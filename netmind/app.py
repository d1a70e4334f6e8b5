from typing import Optional

from .agent.core import Agent
from .agent.llm import AnthropicClient, LLMClient
from .config import AgentConfig
from .tools.builtin import build_default_registry
from .tools.executor import ToolExecutor
from .tools.registry import ToolRegistry


class NetMindApp:
    """
    Public entry point for constructing a NetMind Agent.

    The framework owns the orchestration loop, the memory compaction and
    the tool firewall. The caller may swap the model client and the tool
    catalogue; both default to the production ones.

    Usage
    -----
    agent = NetMindApp.create()
    outcome = agent.run(
        [{"role": "user", "content": "How resilient is my network?"}],
        snapshot=diagram_state,
    )
    """

    @staticmethod
    def create(
        *,
        config: Optional[AgentConfig] = None,
        llm: Optional[LLMClient] = None,
        registry: Optional[ToolRegistry] = None,
        api_key: Optional[str] = None,
    ) -> Agent:
        """
        Construct and return a fully wired Agent.

        This performs pure assembly only: no global state is touched and
        no request is sent.

        Parameters
        ----------
        config : Optional[AgentConfig]
            Loop bounds, model and retry settings. Defaults to AgentConfig().

        llm : Optional[LLMClient]
            Model client. Defaults to AnthropicClient built from `config`.

        registry : Optional[ToolRegistry]
            Tool catalogue. Defaults to the built-in server + canvas tools.

        api_key : Optional[str]
            Passed to the default AnthropicClient; falls back to
            ANTHROPIC_API_KEY. Ignored when `llm` is given.

        Raises
        ------
        RuntimeError
            No `llm` was given and no API key is available.
        """
        config = config or AgentConfig()

        if llm is None:
            llm = AnthropicClient(config=config, api_key=api_key)

        registry = registry or build_default_registry()
        executor = ToolExecutor(registry, max_parallel_tools=config.max_parallel_tools)

        return Agent(llm, executor, config=config)
