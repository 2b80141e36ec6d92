"""Package metadata and naming constants."""

from importlib.metadata import PackageNotFoundError, version

PACKAGE_NAME = "patternkit"
DESCRIPTION = "Composable behavior toolkit: registries, chains, layers, dispatch and state machines"

try:
    __version__ = version(PACKAGE_NAME)
except PackageNotFoundError:
    __version__ = "0.0.0"

VERSION = __version__
