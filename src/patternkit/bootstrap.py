"""Application bootstrap - the process-wide handle passed to callers explicitly."""

from __future__ import annotations

import logging
from typing import Any, Optional

from patternkit.config import AppConfig
from patternkit.config.manager import get_config_manager
from patternkit.infrastructure.chain import Chain
from patternkit.infrastructure.events import Dispatcher
from patternkit.infrastructure.logging.logger import get_logger, setup_logging
from patternkit.infrastructure.registry import Registry


class Application:
    """
    Application context created once at process start.

    Holds the validated configuration, the configured logger and the shared
    registry and dispatcher. There is no module-level accessor; code that
    needs any of these receives the Application (or the piece it needs).
    """

    def __init__(self, config: AppConfig, logger: Any = None):
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.registry = Registry(allow_overwrite=config.registry.allow_overwrite)
        self.dispatcher = Dispatcher()
        self._closed = False

    def new_chain(self, require_handler: Optional[bool] = None) -> Chain:
        """Create a chain using the configured no-match policy unless overridden."""
        if require_handler is None:
            require_handler = self.config.chain.require_handler
        return Chain(require_handler=require_handler)

    def shutdown(self) -> None:
        """Release shared state and flush log handlers."""
        if self._closed:
            return
        self.dispatcher.clear()
        self.registry.clear_registrations()
        for handler in logging.getLogger().handlers:
            handler.flush()
        self._closed = True
        self.logger.debug("Application shut down")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Application:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


def create_application(config_path: Optional[str] = None,
                       config: Optional[AppConfig] = None) -> Application:
    """
    Load configuration, configure logging and build the application context.

    Args:
        config_path: Optional YAML/JSON configuration file
        config: Already validated configuration; skips file loading

    Raises:
        ConfigurationError: If the configuration cannot be loaded or validated
    """
    if config is None:
        config = get_config_manager(config_path).app_config

    if config.logging.destination == "none":
        logger = get_logger("patternkit")
    else:
        logger = setup_logging(config.logging)

    app = Application(config, logger=logger)
    logger.debug(
        "Application initialized",
        environment=config.environment,
        allow_overwrite=config.registry.allow_overwrite,
        require_handler=config.chain.require_handler,
    )
    return app
