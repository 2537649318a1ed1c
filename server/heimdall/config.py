import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by HEIMDALL_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("HEIMDALL_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Heimdall"
    version: str = "0.1.0"
    description: str = "Federated login and session token service"


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "sqlite+aiosqlite:///~/.local/share/heimdall/heimdall.db"
    echo: bool = False
    auto_create: bool = True  # Create tables from metadata on startup


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from HEIMDALL_LOG_FILE env var."""
        return os.environ.get("HEIMDALL_LOG_FILE")


# =============================================================================
# Authentication Configuration
# =============================================================================


class GithubConfig(BaseModel):
    """GitHub OAuth application credentials."""

    name: str = "github"  # Provider identifier used in login/callback URLs
    client_id: str = ""
    client_secret: str = ""
    base_url: str = "https://github.com"
    api_url: str = "https://api.github.com"


class OrcidConfig(BaseModel):
    """ORCiD OAuth configuration."""

    name: str = "orcid"
    client_id: str = ""
    client_secret: str = ""
    sandbox: bool = True  # Use sandbox.orcid.org by default

    @property
    def base_url(self) -> str:
        """Get base URL for ORCiD API based on sandbox setting."""
        return "https://sandbox.orcid.org" if self.sandbox else "https://orcid.org"


class TokenConfig(BaseModel):
    """Session token signing configuration.

    Keys are PEM-encoded Ed25519 keys. A deployment that only verifies
    tokens may leave ``private_key`` empty.
    """

    private_key: str = ""
    public_key: str = ""
    valid_minutes: int = 60 * 24
    issuer: str = ""  # Empty = use Config.app_url


class FlowSessionConfig(BaseModel):
    """Storage for in-flight login attempts (CSRF token + return target)."""

    cookie_name: str = "heimdall_flow"
    ttl_seconds: int = 600
    backend: Literal["memory", "database"] = "database"


class AuthConfig(BaseModel):
    """Authentication configuration."""

    token: TokenConfig = TokenConfig()
    session: FlowSessionConfig = FlowSessionConfig()
    github: GithubConfig = GithubConfig()
    orcid: OrcidConfig = OrcidConfig()
    cookie_name: str = "heimdall_token"
    allowed_returns: list[str] = []  # Origins a login may return to, e.g. https://app.example.com


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    app_url: str = "http://localhost:8000"
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    auth: AuthConfig = AuthConfig()

    model_config = {
        "env_prefix": "HEIMDALL_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows HEIMDALL_AUTH__TOKEN__PUBLIC_KEY override
    }

    @model_validator(mode="after")
    def derive_token_issuer(self) -> Self:
        """Tokens are issued in the name of the application unless overridden."""
        self.app_url = self.app_url.rstrip("/")
        if not self.auth.token.issuer:
            self.auth.token.issuer = self.app_url
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - HEIMDALL_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup, before other modules
    are imported to ensure all loggers pick up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
