"""HTTP server configuration and providers that serve it, optionally refreshed."""

from __future__ import annotations

import dataclasses
import logging
import ssl
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Protocol, runtime_checkable

from .readiness import Handler

DEFAULT_CONFIG_REFRESH = timedelta(minutes=10)
DEFAULT_CIPHERS = "ECDHE-RSA-AES128-GCM-SHA256:ECDHE-ECDSA-AES128-GCM-SHA256"

_log = logging.getLogger(__name__)


def default_tls_context() -> ssl.SSLContext:
    """Return the server TLS context used when HTTPS is enabled."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.options |= ssl.OP_CIPHER_SERVER_PREFERENCE
    context.set_ciphers(DEFAULT_CIPHERS)
    return context


@dataclass
class TLSSettings:
    """TLS options of the HTTP server."""

    enabled: bool = False
    cert_file: str = ""
    cert_key: str = ""
    auto_cert: bool = False
    config: ssl.SSLContext | None = None


@dataclass
class ServerSettings:
    """Listener and runtime options of the HTTP server."""

    listen: str = ""
    debug: bool = False
    dev: bool = False
    shutdown_grace_period: timedelta = timedelta(0)
    tls: TLSSettings = field(default_factory=TLSSettings)
    cors_allow_origins: list[str] = field(default_factory=list)


@dataclass
class Settings:
    """Application settings relevant to serving HTTP."""

    server: ServerSettings = field(default_factory=ServerSettings)
    refresh_interval: timedelta = timedelta(0)


@runtime_checkable
class ConfigProvider(Protocol):
    """Anything that can hand out the current server configuration."""

    def get_config(self) -> ServerConfig:
        """Return the server configuration."""
        ...


@dataclass
class ServerConfig:
    """Everything the HTTP server needs to start."""

    settings: Settings = field(default_factory=Settings)
    logger: logging.Logger | None = None
    routes: list[Any] = field(default_factory=list)
    default_middleware: list[Callable[..., Any]] = field(default_factory=list)
    graph_middleware: list[Callable[..., Any]] = field(default_factory=list)
    handler: Handler = field(default_factory=Handler)
    session_config: Any = None

    def get_config(self) -> ServerConfig:
        """Return this configuration itself."""
        return self

    def with_tls_defaults(self) -> ServerConfig:
        """Return a copy with the default TLS settings applied."""
        return self.with_default_tls_config()

    def with_default_tls_config(self) -> ServerConfig:
        """Return a copy with TLS enabled and the default TLS context; ``self`` is unchanged."""
        server = self.settings.server
        tls = dataclasses.replace(server.tls, enabled=True, config=default_tls_context())
        settings = dataclasses.replace(self.settings, server=dataclasses.replace(server, tls=tls))
        return dataclasses.replace(self, settings=settings)

    def with_tls_certs(self, cert_file: str, cert_key: str) -> ServerConfig:
        """Set the certificate and key file locations and return ``self``."""
        self.settings.server.tls.cert_file = cert_file
        self.settings.server.tls.cert_key = cert_key
        return self


class ConfigProviderWithRefresh:
    """Wraps a provider and reloads its configuration at the configured interval."""

    def __init__(self, provider: ConfigProvider) -> None:
        self._config = provider.get_config()
        self._provider = provider
        self._lock = threading.RLock()
        self._refresh_interval = self._config.settings.refresh_interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

        if self._refresh_interval:
            self._thread = threading.Thread(target=self._refresh, name="config-refresh", daemon=True)
            self._thread.start()

    @property
    def refreshing(self) -> bool:
        """Whether the background refresh is running."""
        return self._thread is not None and self._thread.is_alive()

    def get_config(self) -> ServerConfig:
        """Return the most recently loaded configuration."""
        with self._lock:
            return self._config

    def _logger(self) -> logging.Logger:
        return self._config.logger or _log

    def _refresh(self) -> None:
        interval = self._refresh_interval.total_seconds()
        while not self._stop.wait(interval):
            try:
                new_config = self._provider.get_config()
            except Exception:  # noqa: BLE001 - keep serving the last good config
                self._logger().error("failed to load new server configuration")
                continue

            self._logger().info("loaded new server configuration")
            with self._lock:
                self._config = new_config

    def close(self) -> None:
        """Stop the automatic refresh."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()

    def __enter__(self) -> ConfigProviderWithRefresh:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()