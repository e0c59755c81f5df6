# zchat/config.py
"""
Configuration management for zchat.

Configuration is read from a TOML file, then overridden by environment
variables (and a .env file, if present). The result is a frozen AppConfig
built once at startup and passed explicitly to every collaborator.
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import tomli_w
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from zchat.constants import (
    CONFIG_FILE,
    DEFAULT_DANGEROUS_PATTERNS,
    DEFAULT_MAX_CONTEXT_LINES,
    DEFAULT_MODELS,
    DEFAULT_OLLAMA_URL,
    DEFAULT_PROVIDER,
    PROVIDER_ANTHROPIC,
    PROVIDER_GEMINI,
    PROVIDERS,
    REQUEST_TIMEOUT,
)
from zchat.safety.classifier import SafetyPolicy
from zchat.utils.logging import get_logger

logger = get_logger(__name__)

# Environment variable -> config field
ENV_OVERRIDES = {
    "ZCHAT_PROVIDER": "provider",
    "ZCHAT_MODEL": "model",
    "OLLAMA_URL": "ollama_url",
}

# Provider -> environment variable holding its API key
API_KEY_ENV_VARS = {
    PROVIDER_ANTHROPIC: "ANTHROPIC_API_KEY",
    PROVIDER_GEMINI: "GEMINI_API_KEY",
}


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""


class AppConfig(BaseModel):
    """Application configuration settings."""
    model_config = ConfigDict(frozen=True)

    provider: str = Field(DEFAULT_PROVIDER, description="Model backend: ollama, anthropic or gemini")
    model: Optional[str] = Field(None, description="Model name; the provider default when unset")
    api_key: Optional[str] = Field(None, description="API key for cloud providers")
    ollama_url: str = Field(DEFAULT_OLLAMA_URL, description="Base URL of the Ollama server")
    max_context_lines: int = Field(DEFAULT_MAX_CONTEXT_LINES, ge=1, description="Maximum files listed in the prompt")
    dangerous_patterns: Tuple[str, ...] = Field(
        DEFAULT_DANGEROUS_PATTERNS,
        description="Case-insensitive substrings that mark a command as dangerous",
    )
    request_timeout: float = Field(REQUEST_TIMEOUT, gt=0, description="Deadline for command generation, in seconds")
    execution_timeout: Optional[float] = Field(None, gt=0, description="Deadline for the executed command, in seconds")
    debug: bool = Field(False, description="Enable debug mode")

    @field_validator("provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def resolved_model(self) -> str:
        """The configured model, or the default for the provider."""
        return self.model or DEFAULT_MODELS.get(self.provider, "")

    def safety_policy(self) -> SafetyPolicy:
        """Build the immutable safety policy for this run."""
        return SafetyPolicy(patterns=tuple(self.dangerous_patterns))

    def validate_provider(self) -> None:
        """
        Check provider-level consistency.

        Raises:
            ConfigError: If the provider is unknown or a cloud provider has no API key.
        """
        if self.provider not in PROVIDERS:
            raise ConfigError(
                f"invalid provider: {self.provider} (must be one of {', '.join(PROVIDERS)})"
            )
        env_var = API_KEY_ENV_VARS.get(self.provider)
        if env_var and not self.api_key:
            raise ConfigError(
                f"API key is required for {self.provider}. Set {env_var} or add "
                f"api_key to {CONFIG_FILE}"
            )


class ConfigManager:
    """Loads and saves the zchat configuration file."""

    def __init__(self, config_file: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self._environ = environ

    def _environment(self) -> Mapping[str, str]:
        if self._environ is not None:
            return self._environ
        load_dotenv()
        return os.environ

    def _read_file(self) -> Dict[str, object]:
        if not self.config_file.exists():
            logger.debug(f"Configuration file not found at '{self.config_file}'. Using defaults.")
            return {}

        logger.debug(f"Loading configuration from: {self.config_file}")
        try:
            with open(self.config_file, "rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"failed to parse config file {self.config_file}: {e}") from e
        except OSError as e:
            raise ConfigError(f"cannot read config file {self.config_file}: {e}") from e

    def _apply_environment(self, data: Dict[str, object]) -> Dict[str, object]:
        environ = self._environment()
        for env_var, field in ENV_OVERRIDES.items():
            value = environ.get(env_var)
            if value:
                logger.debug(f"Overriding '{field}' from {env_var}")
                data[field] = value

        provider = str(data.get("provider", DEFAULT_PROVIDER)).strip().lower()
        key_var = API_KEY_ENV_VARS.get(provider)
        if key_var and environ.get(key_var):
            data["api_key"] = environ[key_var]
        return data

    def load(self) -> AppConfig:
        """
        Load configuration from the file and the environment.

        A missing file is not an error. Environment variables take precedence
        over file values.

        Returns:
            The validated, frozen configuration.

        Raises:
            ConfigError: If the file is malformed or the result is invalid.
        """
        data = self._apply_environment(dict(self._read_file()))
        try:
            config = AppConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

        config.validate_provider()
        logger.debug(
            f"Configuration loaded: provider={config.provider}, model={config.resolved_model}, "
            f"{len(config.dangerous_patterns)} dangerous patterns"
        )
        return config

    def save(self, config: AppConfig) -> Path:
        """Write the configuration to the TOML file and return its path."""
        # TOML has no null, so unset optional values are left out
        config_dict = config.model_dump(exclude_none=True)
        config_dict["dangerous_patterns"] = list(config.dangerous_patterns)

        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.config_file, "wb") as f:
                tomli_w.dump(config_dict, f)
        except OSError as e:
            raise ConfigError(f"cannot write config file {self.config_file}: {e}") from e

        logger.info(f"Configuration saved to {self.config_file}")
        return self.config_file
