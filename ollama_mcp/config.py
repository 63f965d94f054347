"""Configuration: settings from YAML and environment, resolved into a frozen Config."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from .backend.client import OllamaClient
from .errors import ConfigurationUnavailableError

logger = logging.getLogger(__name__)

# Configuration file path
CONFIG_FILE = Path("config.yaml")

# Compiled-in defaults
DEFAULT_CONTEXT_SIZE = 32000
DEFAULT_CODE_MODEL = "qwen3-coder:30b"
DEFAULT_CHAT_MODEL = "gpt-oss:20b"
DEFAULT_KEEP_ALIVE = "1m"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 11434


class OllamaConfig(BaseModel):
    """Backend endpoint and per-tool defaults."""

    host: Optional[str] = Field(
        None, description="Ollama endpoint, same grammar as OLLAMA_HOST"
    )
    context_size: int = Field(
        DEFAULT_CONTEXT_SIZE, description="Default context size in tokens (num_ctx)"
    )
    code_model: str = Field(DEFAULT_CODE_MODEL, description="Model used by the code tool")
    chat_model: str = Field(DEFAULT_CHAT_MODEL, description="Model used by the chat tool")
    keep_alive: str = Field(
        DEFAULT_KEEP_ALIVE, description="How long the backend keeps a model loaded"
    )
    custom_client: bool = Field(
        False, description="Use the long-running HTTP client profile"
    )

    @field_validator("context_size", mode="before")
    @classmethod
    def fallback_context_size(cls, v: Any) -> int:
        # Unparseable or non-positive values are not fatal
        try:
            size = int(str(v).strip())
        except (TypeError, ValueError):
            return DEFAULT_CONTEXT_SIZE
        return size if size > 0 else DEFAULT_CONTEXT_SIZE

    @field_validator("code_model", "chat_model", "keep_alive", mode="before")
    @classmethod
    def fallback_blank(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("custom_client", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("1", "true", "yes", "on")
        return bool(v)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Logging level")
    file: Optional[str] = Field(None, description="Optional log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class MCPConfig(BaseModel):
    """MCP server configuration."""

    name: str = Field("ollama-mcp", description="Server name announced to clients")


class Settings(BaseSettings):
    """Unified settings for the ollama-mcp server."""

    mcp: MCPConfig = Field(default_factory=MCPConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",  # Allows OLLAMA__CHAT_MODEL env var
        extra="ignore",
        validate_default=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings sources to include YAML files and flat env vars."""
        from pydantic_settings.sources import PydanticBaseSettingsSource

        class YamlConfigSource(PydanticBaseSettingsSource):
            """Load settings from the YAML file."""

            def get_field_value(
                self, field: FieldInfo, field_name: str
            ) -> Tuple[Any, str, bool]:
                data = self()
                if field_name in data:
                    return data[field_name], field_name, True
                return None, field_name, False

            def __call__(self) -> Dict[str, Any]:
                return cls._yaml_config_source()

        class FlatEnvVars(PydanticBaseSettingsSource):
            """Load flat environment variables such as OLLAMA_HOST."""

            def get_field_value(
                self, field: FieldInfo, field_name: str
            ) -> Tuple[Any, str, bool]:
                data = self()
                if field_name in data:
                    return data[field_name], field_name, True
                return None, field_name, False

            def __call__(self) -> Dict[str, Any]:
                return cls._flat_env_source()

        # Precedence (left to right - first source wins):
        # init > nested env > flat env > yaml > defaults
        return (
            init_settings,
            env_settings,
            FlatEnvVars(settings_cls),
            YamlConfigSource(settings_cls),
        )

    @classmethod
    def _yaml_config_source(cls) -> Dict[str, Any]:
        """Load configuration from the YAML file."""
        import sys

        explicit = os.getenv("OLLAMA_MCP_CONFIG_FILE")

        # Under pytest the default config.yaml is skipped so tests cannot be
        # polluted by a developer's real configuration
        if "pytest" in sys.modules and not explicit:
            return {}

        config_file = Path(explicit) if explicit else CONFIG_FILE
        if not config_file.exists():
            return {}

        try:
            with open(config_file) as f:
                config_data = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from {config_file}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load {config_file}: {e}")
            return {}

        if not isinstance(config_data, dict):
            logger.warning(f"Ignoring {config_file}: top level is not a mapping")
            return {}

        # Handle None values from YAML (e.g., "ollama:" with no content)
        for key in list(config_data.keys()):
            if config_data[key] is None:
                config_data[key] = {}

        return config_data

    @classmethod
    def _flat_env_source(cls) -> Dict[str, Any]:
        """Map flat environment variables onto the nested structure."""
        config_data: Dict[str, Any] = {}

        for env_key, path in FLAT_ENV_VARS.items():
            value = os.getenv(env_key)
            # Empty values count as unset
            if not value:
                continue

            current = config_data
            for key in path[:-1]:
                current = current.setdefault(key, {})
            current[path[-1]] = value

        return config_data

    def export_env(self) -> Dict[str, str]:
        """Export settings as flat environment variables."""
        env_vars = {
            "OLLAMA_HOST": self.ollama.host or "",
            "OLLAMA_CONTEXT_SIZE": str(self.ollama.context_size),
            "OLLAMA_CODE_MODEL": self.ollama.code_model,
            "OLLAMA_CHAT_MODEL": self.ollama.chat_model,
            "OLLAMA_KEEP_ALIVE": self.ollama.keep_alive,
            "OLLAMA_CUSTOM_CLIENT": str(self.ollama.custom_client).lower(),
            "LOG_LEVEL": self.logging.level,
            "OLLAMA_MCP_LOG_FILE": self.logging.file or "",
        }

        # Filter out empty values
        return {k: v for k, v in env_vars.items() if v}


FLAT_ENV_VARS: Dict[str, Tuple[str, ...]] = {
    "OLLAMA_HOST": ("ollama", "host"),
    "OLLAMA_CONTEXT_SIZE": ("ollama", "context_size"),
    "OLLAMA_CODE_MODEL": ("ollama", "code_model"),
    "OLLAMA_CHAT_MODEL": ("ollama", "chat_model"),
    "OLLAMA_KEEP_ALIVE": ("ollama", "keep_alive"),
    "OLLAMA_CUSTOM_CLIENT": ("ollama", "custom_client"),
    "LOG_LEVEL": ("logging", "level"),
    "OLLAMA_MCP_LOG_FILE": ("logging", "file"),
}


def resolve_base_url(host: Optional[str]) -> str:
    """Resolve an OLLAMA_HOST style value into the backend base URL.

    Accepts ``host``, ``host:port``, ``:port``, ``scheme://host[:port][/path]``
    and bracketed IPv6 literals. Without a scheme the port defaults to 11434;
    with an explicit http/https scheme it defaults to 80/443.

    Raises:
        ConfigurationUnavailableError: unsupported scheme or invalid port
    """
    raw = (host or "").strip()
    scheme, sep, rest = raw.partition("://")
    if sep:
        scheme = scheme.lower()
        if scheme not in ("http", "https"):
            raise ConfigurationUnavailableError(
                f"invalid backend endpoint {raw!r}: unsupported scheme {scheme!r}"
            )
        default_port = 443 if scheme == "https" else 80
    else:
        scheme, rest, default_port = "http", raw, DEFAULT_PORT

    hostport, _, path = rest.partition("/")
    try:
        parts = urlsplit(f"//{hostport}")
        port = parts.port
    except ValueError as e:
        raise ConfigurationUnavailableError(
            f"invalid backend endpoint {raw!r}: {e}"
        ) from e

    hostname = parts.hostname or DEFAULT_HOST
    if ":" in hostname:
        hostname = f"[{hostname}]"
    base_url = f"{scheme}://{hostname}:{port or default_port}"
    if path:
        base_url = f"{base_url}/{path.rstrip('/')}"
    return base_url


@dataclass(frozen=True)
class Config:
    """Immutable configuration snapshot handed to the dispatcher."""

    client: Optional[OllamaClient]
    context_size: int = DEFAULT_CONTEXT_SIZE
    code_model: str = DEFAULT_CODE_MODEL
    chat_model: str = DEFAULT_CHAT_MODEL
    keep_alive: str = DEFAULT_KEEP_ALIVE

    def get_model(self, tool_name: str) -> str:
        """Return the default model for a tool family."""
        if tool_name == "code":
            return self.code_model
        return self.chat_model


def load_config(settings: Optional[Settings] = None) -> Config:
    """Resolve settings into a Config with a backend client bound to the endpoint."""
    if settings is None:
        settings = Settings()

    ollama = settings.ollama
    base_url = resolve_base_url(ollama.host)
    client = OllamaClient(base_url, custom_profile=ollama.custom_client)
    logger.debug(
        f"Resolved backend {base_url} (custom_client={ollama.custom_client}), "
        f"chat={ollama.chat_model}, code={ollama.code_model}, "
        f"num_ctx={ollama.context_size}, keep_alive={ollama.keep_alive}"
    )

    return Config(
        client=client,
        context_size=ollama.context_size,
        code_model=ollama.code_model,
        chat_model=ollama.chat_model,
        keep_alive=ollama.keep_alive,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_config() -> Config:
    """Get the process-wide configuration, built once by the bootstrap."""
    return load_config(get_settings())
