"""Tests for the application bootstrap and logging setup."""

import logging

import pytest

from patternkit.bootstrap import Application, create_application
from patternkit.config import AppConfig, LoggingConfig, RegistryConfig, ChainConfig
from patternkit.domain.exceptions import ConfigurationError, DuplicateKeyError
from patternkit.infrastructure.chain import Outcome
from patternkit.infrastructure.logging import setup_logging


class TestApplication:
    """Test the explicit application handle."""

    def test_registry_follows_overwrite_policy(self):
        app = Application(AppConfig(registry=RegistryConfig(allow_overwrite=True)))
        app.registry.register("a", lambda: 1)
        app.registry.register("a", lambda: 2)

        assert app.registry.resolve("a") == 2

    def test_registry_rejects_duplicates_by_default(self, app_config):
        app = Application(app_config)
        app.registry.register("a", lambda: 1)

        with pytest.raises(DuplicateKeyError):
            app.registry.register("a", lambda: 2)

    def test_new_chain_uses_configured_policy(self):
        app = Application(AppConfig(chain=ChainConfig(require_handler=True)))

        assert app.new_chain().run("x").outcome is Outcome.UNHANDLED
        assert app.new_chain(require_handler=False).run("x").outcome is Outcome.COMPLETED

    def test_separate_applications_do_not_share_state(self, app_config):
        first = Application(app_config)
        second = Application(app_config)
        first.registry.register("a", object)

        assert not second.registry.is_registered("a")
        assert first.dispatcher is not second.dispatcher

    def test_shutdown_clears_state_once(self, app_config):
        app = Application(app_config)
        app.registry.register("a", object)
        app.dispatcher.subscribe("s", lambda event: None)

        app.shutdown()
        app.shutdown()

        assert app.closed
        assert len(app.registry) == 0
        assert len(app.dispatcher) == 0

    def test_context_manager(self, app_config):
        with Application(app_config) as app:
            assert not app.closed

        assert app.closed


class TestCreateApplication:

    def test_with_config_object(self, app_config):
        app = create_application(config=app_config)

        assert app.config is app_config

    def test_from_file(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("registry:\n  allow_overwrite: true\n")

        app = create_application(str(config_file))

        assert app.registry.allow_overwrite is True

    def test_invalid_file_raises_configuration_error(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("environment: nowhere\n")

        with pytest.raises(ConfigurationError):
            create_application(str(config_file))


class TestSetupLogging:
    """Test root logger configuration."""

    def setup_method(self):
        root = logging.getLogger()
        self._saved_handlers = root.handlers[:]
        self._saved_level = root.level

    def teardown_method(self):
        root = logging.getLogger()
        for handler in root.handlers[:]:
            if handler not in self._saved_handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(self._saved_level)

    def test_file_destination_writes_records(self, tmp_path):
        log_file = tmp_path / "logs" / "patternkit.log"
        config = LoggingConfig(level="DEBUG", destination="file", file_path=str(log_file))

        logger = setup_logging(config)
        logger.info("hello", component="registry")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "event='hello'" in content
        assert "component='registry'" in content
        assert "INFO" in content

    def test_level_applied_to_root(self, tmp_path):
        setup_logging(LoggingConfig(level="ERROR", destination="stderr"))

        assert logging.getLogger().level == logging.ERROR
        assert len(logging.getLogger().handlers) == 1
