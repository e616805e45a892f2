"""authbridge - multi-provider OAuth 2.0 login for single-page frontends."""

from authbridge.version import PACKAGE_NAME, PACKAGE_VERSION

__all__ = ["PACKAGE_NAME", "PACKAGE_VERSION"]
