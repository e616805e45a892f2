"""Package version information."""

from importlib.metadata import PackageNotFoundError, version

PACKAGE_NAME = "authbridge"

try:
    PACKAGE_VERSION = version(PACKAGE_NAME)
except PackageNotFoundError:
    PACKAGE_VERSION = "unknown"

__all__ = ["PACKAGE_NAME", "PACKAGE_VERSION"]
