"""URL generation for OAuth callbacks and frontend redirects, with reverse proxy support."""

from __future__ import annotations

import logging

from starlette.requests import Request

from .models import HttpTransportConfigModel

logger = logging.getLogger(__name__)


class URLBuilder:
    """Builds the public base URL of this server.

    Handles:
    - Base URL override
    - Explicit scheme configuration (http/https)
    - Reverse proxy header detection (X-Forwarded-Proto, X-Forwarded-Scheme,
      X-Forwarded-Host) when `trust_proxy` is enabled
    - Fallback to the request's own scheme and host, then to configured host/port
    """

    def __init__(self, transport_config: HttpTransportConfigModel | None = None):
        self.transport_config = transport_config or HttpTransportConfigModel()

    def get_base_url(self, request: Request | None = None) -> str:
        """Get the base URL for the server, e.g. 'https://app.example.com'."""
        # 1. Explicit base_url override
        if self.transport_config.base_url:
            logger.debug(f"Using explicit base_url from config: {self.transport_config.base_url}")
            return self.transport_config.base_url.rstrip("/")

        scheme = self._detect_scheme(request)
        netloc = self._detect_netloc(request)
        base_url = f"{scheme}://{netloc}"
        logger.debug(f"Built base URL: {base_url}")
        return base_url

    def build_url(self, path: str, request: Request | None = None) -> str:
        return f"{self.get_base_url(request)}/{path.lstrip('/')}"

    def _detect_netloc(self, request: Request | None) -> str:
        if request is not None:
            if self.transport_config.trust_proxy:
                forwarded_host = request.headers.get("x-forwarded-host")
                if forwarded_host:
                    return forwarded_host.split(",")[0].strip()
            host_header = request.headers.get("host")
            if host_header:
                return host_header

        host = self.transport_config.host
        port = self.transport_config.port
        scheme = self.transport_config.scheme or "http"
        if (scheme == "https" and port == 443) or (scheme == "http" and port == 80):
            # Standard ports - omit from URL
            return host
        return f"{host}:{port}"

    def _detect_scheme(self, request: Request | None) -> str:
        """Detect the URL scheme.

        Priority order:
        1. Explicit scheme in transport config
        2. X-Forwarded-Proto header (if trust_proxy enabled)
        3. X-Forwarded-Scheme header (if trust_proxy enabled)
        4. Request scheme (if available)
        5. Default to 'http'
        """
        if self.transport_config.scheme:
            return self.transport_config.scheme

        if self.transport_config.trust_proxy and request is not None:
            forwarded_proto = request.headers.get("x-forwarded-proto")
            if forwarded_proto:
                # Handle comma-separated values (take first)
                scheme = forwarded_proto.split(",")[0].strip().lower()
                if scheme in ("http", "https"):
                    return scheme

            forwarded_scheme = request.headers.get("x-forwarded-scheme")
            if forwarded_scheme:
                scheme = forwarded_scheme.strip().lower()
                if scheme in ("http", "https"):
                    return scheme

        if request is not None:
            scheme = request.url.scheme.lower()
            if scheme in ("http", "https"):
                return scheme

        return "http"


__all__ = ["URLBuilder"]
