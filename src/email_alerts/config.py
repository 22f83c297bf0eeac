"""Configuration management for email alerts.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "email-alerts.toml"

DEFAULT_SUBSCRIBER_HEADER = "X-Subscriber-Id"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class NotificationServiceConfig:
    """Notification service configuration."""

    base_url: str = "http://localhost:3088"
    auth_token: str | None = None
    timeout: float = 10.0


@dataclass
class ContentStoreConfig:
    """Content repository configuration."""

    base_url: str = "http://localhost:3068"
    timeout: float = 10.0


@dataclass
class AuthConfig:
    """Authentication gate configuration."""

    subscriber_header: str = DEFAULT_SUBSCRIBER_HEADER


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    notification_service: NotificationServiceConfig = field(
        default_factory=NotificationServiceConfig
    )
    content_store: ContentStoreConfig = field(default_factory=ContentStoreConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for email-alerts.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        return cls(
            server=cls._parse_server(data.get("server")),
            notification_service=cls._parse_notification_service(
                data.get("notification_service")
            ),
            content_store=cls._parse_content_store(data.get("content_store")),
            auth=cls._parse_auth(data.get("auth")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_notification_service(cls, data: object) -> NotificationServiceConfig:
        """Parse notification_service configuration section.

        Args:
            data: Raw notification_service section data

        Returns:
            NotificationServiceConfig instance
        """
        if data is None:
            return NotificationServiceConfig()

        if not isinstance(data, dict):
            raise ValueError("notification_service section must be a dictionary")

        base_url = data.get("base_url", NotificationServiceConfig.base_url)
        if not isinstance(base_url, str):
            raise ValueError("notification_service.base_url must be a string")

        auth_token = data.get("auth_token")
        if auth_token is not None and not isinstance(auth_token, str):
            raise ValueError("notification_service.auth_token must be a string")

        timeout = _parse_timeout(data, "notification_service")

        return NotificationServiceConfig(
            base_url=base_url, auth_token=auth_token, timeout=timeout
        )

    @classmethod
    def _parse_content_store(cls, data: object) -> ContentStoreConfig:
        """Parse content_store configuration section.

        Args:
            data: Raw content_store section data

        Returns:
            ContentStoreConfig instance
        """
        if data is None:
            return ContentStoreConfig()

        if not isinstance(data, dict):
            raise ValueError("content_store section must be a dictionary")

        base_url = data.get("base_url", ContentStoreConfig.base_url)
        if not isinstance(base_url, str):
            raise ValueError("content_store.base_url must be a string")

        return ContentStoreConfig(
            base_url=base_url, timeout=_parse_timeout(data, "content_store")
        )

    @classmethod
    def _parse_auth(cls, data: object) -> AuthConfig:
        if data is None:
            return AuthConfig()

        if not isinstance(data, dict):
            raise ValueError("auth section must be a dictionary")

        header = data.get("subscriber_header", DEFAULT_SUBSCRIBER_HEADER)
        if not isinstance(header, str) or not header:
            raise ValueError("auth.subscriber_header must be a non-empty string")

        return AuthConfig(subscriber_header=header)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        notification_service_url: str | None = None,
        content_store_url: str | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            notification_service_url: Override notification_service.base_url
            content_store_url: Override content_store.base_url

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        notification_service = self.notification_service
        if notification_service_url is not None:
            notification_service = replace(
                self.notification_service, base_url=notification_service_url
            )

        content_store = self.content_store
        if content_store_url is not None:
            content_store = replace(self.content_store, base_url=content_store_url)

        return replace(
            self,
            server=server,
            notification_service=notification_service,
            content_store=content_store,
        )


def _parse_timeout(data: dict[str, object], section: str) -> float:
    timeout = data.get("timeout", 10.0)
    if isinstance(timeout, bool) or not isinstance(timeout, int | float):
        raise ValueError(f"{section}.timeout must be a number")
    if timeout <= 0:
        raise ValueError(f"{section}.timeout must be positive")
    return float(timeout)
