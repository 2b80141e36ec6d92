import io
import os

import pytest
import structlog

from patternkit.config import AppConfig, LoggingConfig
from patternkit.infrastructure.events import Dispatcher
from patternkit.infrastructure.registry import Registry


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep tests independent of the caller's PATTERNKIT_* settings and logging."""
    for name in list(os.environ):
        if name.startswith("PATTERNKIT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PATTERNKIT_LOG_DESTINATION", "none")
    yield
    structlog.reset_defaults()


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def dispatcher():
    return Dispatcher()


@pytest.fixture
def app_config():
    return AppConfig(logging=LoggingConfig(destination="none"))


@pytest.fixture
def run_cli():
    """Run the CLI in-process and capture exit code, stdout and stderr."""
    from patternkit.cli.main import main

    def _run(*argv, stdin=""):
        stdout, stderr = io.StringIO(), io.StringIO()
        code = main(list(argv), stdin=io.StringIO(stdin), stdout=stdout, stderr=stderr)
        return code, stdout.getvalue(), stderr.getvalue()

    return _run
