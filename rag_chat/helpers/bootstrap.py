from logging import Logger
from typing import Optional

from rag_chat.agents.orchestrator_system import OrchestratorSystem
from rag_chat.config.pipeline import PipelineConfig
from rag_chat.config.settings import config
from rag_chat.providers.registry import ProviderRegistry, build_registry
from rag_chat.utils.exceptions import AgentError, ConfigurationError, ProviderError
from rag_chat.utils.logger import logger


def _build_providers(log: Logger) -> ProviderRegistry:
    if not config.validate():
        log.warning("Required API keys are missing; provider initialization will fail")
    try:
        registry = build_registry(config)
        log.info("✓ Provider registry ready")
        return registry
    except (ConfigurationError, ProviderError) as e:
        log.error(f"✗ Failed to initialize providers: {e}", exc_info=True)
        raise e
    except Exception as e:
        log.error(f"✗ Unexpected error initializing providers: {e}", exc_info=True)
        raise e


def init(
    pipeline_config: Optional[PipelineConfig] = None,
    registry: Optional[ProviderRegistry] = None,
) -> tuple[Logger, OrchestratorSystem]:
    log: Logger = logger
    log.info("Starting RAG chat assistant")

    try:
        pipeline_config = pipeline_config or PipelineConfig.from_env()
    except ConfigurationError as e:
        log.error(f"Invalid pipeline configuration: {e}", exc_info=True)
        raise e

    registry = registry or _build_providers(log)

    # Initialize orchestrator and agents
    try:
        orchestrator = OrchestratorSystem(registry, pipeline_config)
    except AgentError as e:
        log.error(f"Failed to initialize agents: {e}", exc_info=True)
        raise e
    except Exception as e:
        log.error(f"Unexpected error initializing agents: {e}", exc_info=True)
        raise e

    return log, orchestrator
