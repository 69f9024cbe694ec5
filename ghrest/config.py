"""Configuration management for the ghrest client.

Configuration Precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables
    3. Default values

Environment Variables:
    GITHUB_TOKEN: Token to adopt at startup
    GITHUB_DEV_TOKEN: Path of the persisted token file (default: .github_token)
    GITHUB_BASE_URL: API base URL (default: https://api.github.com)
    GITHUB_TIMEOUT: Request timeout in seconds (default: 30)
    GHREST_PAGE_LIMIT: Default item ceiling for paginated fetches (default: 1000)
    GHREST_PAGE_DELAY: Default pause between pages in seconds (default: 3)

Example:
    >>> config = ClientConfig()
    >>> fast = config.with_overrides(page_delay=0.0)

"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from dotenv import load_dotenv

from ghrest.exceptions import ConfigurationError

# Auto-load .env file if it exists (searches current dir and parents)
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable configuration for the ghrest client.

    Attributes:
        base_url: GitHub API base URL.
        token: Token adopted at startup, if any.
        token_file: Where a minted or adopted token is persisted.
        timeout: Request timeout in seconds.
        page_limit: Default item ceiling for paginated fetches.
        page_delay: Default pause between page requests, in seconds.
        rate_limit_ttl: Seconds a rate-limit snapshot stays fresh.
        rate_limit_gate: Refuse dispatch when the quota is exhausted.
        persist_token: Save adopted tokens to ``token_file``.
        user_agent: User-Agent header for requests.

    """

    DEFAULT_BASE_URL: ClassVar[str] = "https://api.github.com"
    DEFAULT_TOKEN_FILE: ClassVar[str] = ".github_token"
    DEFAULT_TIMEOUT: ClassVar[float] = 30.0
    DEFAULT_PAGE_LIMIT: ClassVar[int] = 1000
    DEFAULT_PAGE_DELAY: ClassVar[float] = 3.0
    DEFAULT_RATE_LIMIT_TTL: ClassVar[int] = 60

    base_url: str = field(
        default_factory=lambda: _get_env("GITHUB_BASE_URL", ClientConfig.DEFAULT_BASE_URL)
    )
    token: str | None = field(default_factory=lambda: _get_env_optional("GITHUB_TOKEN"))
    token_file: str = field(
        default_factory=lambda: _get_env("GITHUB_DEV_TOKEN", ClientConfig.DEFAULT_TOKEN_FILE)
    )
    timeout: float = field(
        default_factory=lambda: float(_get_env("GITHUB_TIMEOUT", str(ClientConfig.DEFAULT_TIMEOUT)))
    )
    page_limit: int = field(
        default_factory=lambda: int(
            _get_env("GHREST_PAGE_LIMIT", str(ClientConfig.DEFAULT_PAGE_LIMIT))
        )
    )
    page_delay: float = field(
        default_factory=lambda: float(
            _get_env("GHREST_PAGE_DELAY", str(ClientConfig.DEFAULT_PAGE_DELAY))
        )
    )
    rate_limit_ttl: int = DEFAULT_RATE_LIMIT_TTL
    rate_limit_gate: bool = False
    persist_token: bool = True
    user_agent: str = "ghrest/1.0"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate all configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid.

        """
        # Validate base_url
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty")
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid base_url: {self.base_url} (must start with http:// or https://)"
            )

        # Paths are joined with a leading slash
        if self.base_url.endswith("/"):
            # Frozen dataclass
            object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        # Blank token means none
        if self.token is not None and not self.token.strip():
            object.__setattr__(self, "token", None)

        # Validate token_file
        if not self.token_file:
            raise ConfigurationError("token_file cannot be empty")

        # Validate timeout
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

        # Validate pagination
        if self.page_limit < 1:
            raise ConfigurationError(f"page_limit must be at least 1, got {self.page_limit}")

        if self.page_delay < 0:
            raise ConfigurationError(f"page_delay cannot be negative, got {self.page_delay}")

        # Validate rate_limit_ttl
        if self.rate_limit_ttl < 0:
            raise ConfigurationError(
                f"rate_limit_ttl cannot be negative, got {self.rate_limit_ttl}"
            )

    @property
    def is_authenticated(self) -> bool:
        """Check whether a token was configured."""
        return self.token is not None

    def with_overrides(self, **kwargs: object) -> ClientConfig:
        """Create a new configuration with specified overrides.

        Args:
            **kwargs: Configuration values to override.

        Returns:
            A new ClientConfig with the specified overrides.

        Example:
            >>> base_config = ClientConfig(token="ghp_xxx")
            >>> test_config = base_config.with_overrides(page_delay=0.0)

        """
        current_values: dict[str, object] = {
            "base_url": self.base_url,
            "token": self.token,
            "token_file": self.token_file,
            "timeout": self.timeout,
            "page_limit": self.page_limit,
            "page_delay": self.page_delay,
            "rate_limit_ttl": self.rate_limit_ttl,
            "rate_limit_gate": self.rate_limit_gate,
            "persist_token": self.persist_token,
            "user_agent": self.user_agent,
        }
        current_values.update(kwargs)
        return ClientConfig(**current_values)  # type: ignore[arg-type]


def _get_env(key: str, default: str) -> str:
    """Get environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        The environment variable value or default.

    """
    value = os.environ.get(key)
    if value is None or value == "":
        return default
    return value


def _get_env_optional(key: str) -> str | None:
    value = os.environ.get(key)
    if value is None or value == "":
        return None
    return value
