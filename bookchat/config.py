"""Configuration management for the bookstore chat client."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

from .llm.models import ProviderConfig


class Configuration:
    """Manages configuration and environment variables for the chat client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self.config_path = config_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @property
    def active_provider(self) -> str:
        return self._config.get("llm", {}).get("active", "openrouter")

    @property
    def llm_api_key(self) -> str:
        """Get the API key for the active LLM provider.

        Returns:
            The API key as a string.

        Raises:
            ValueError: If the API key is not found in environment variables.
        """
        provider_key_map = {
            "openrouter": "OPENROUTER_API_KEY",
            "openai": "OPENAI_API_KEY",
            "groq": "GROQ_API_KEY",
        }

        env_key = provider_key_map.get(self.active_provider)
        if not env_key:
            raise ValueError(
                f"Unknown provider '{self.active_provider}' - no API key mapping found"
            )

        api_key = os.getenv(env_key)
        if not api_key:
            raise ValueError(
                f"API key '{env_key}' not found in environment variables "
                f"for provider '{self.active_provider}'"
            )

        return api_key

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get_llm_config(self) -> dict[str, Any]:
        """Get active LLM provider configuration from YAML.

        Returns:
            Active LLM provider configuration dictionary.

        Raises:
            ValueError: If the active provider or a required key is missing.
        """
        providers = self._config.get("llm", {}).get("providers", {})

        if self.active_provider not in providers:
            raise ValueError(
                f"Active provider '{self.active_provider}' not found in providers config"
            )

        llm_config = providers[self.active_provider]
        for key in ["base_url", "model", "temperature"]:
            if key not in llm_config:
                raise ValueError(
                    f"llm.providers.{self.active_provider}.{key} must be "
                    "explicitly configured in config.yaml"
                )
        return llm_config

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client timeouts for the active LLM provider.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If a timeout is missing or not positive.
        """
        http_config = self.get_llm_config().get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured "
                    f"for provider '{self.active_provider}' in config.yaml"
                )

        for key in required_keys:
            value = http_config[key]
            # null read_timeout keeps stream reads unbounded
            if value is None and key == "read_timeout":
                continue
            if not isinstance(value, int | float) or value <= 0:
                raise ValueError(f"http_client.{key} must be a positive number")

        return http_config

    def get_provider_config(self) -> ProviderConfig:
        """Build the injected provider configuration for the chat client."""
        llm_config = self.get_llm_config()
        http_config = self.get_http_client_config()

        return ProviderConfig(
            provider=self.active_provider,
            base_url=llm_config["base_url"],
            model=llm_config["model"],
            api_key=self.llm_api_key,
            temperature=float(llm_config["temperature"]),
            app_name=llm_config.get("app_name"),
            app_url=llm_config.get("app_url"),
            connect_timeout=http_config["connect_timeout"],
            read_timeout=http_config["read_timeout"],
            write_timeout=http_config["write_timeout"],
            pool_timeout=http_config["pool_timeout"],
        )

    def get_chat_service_config(self) -> dict[str, Any]:
        """Get chat service configuration from YAML.

        Raises:
            ValueError: If system_prompt or greeting is not configured.
        """
        service_config = self._config.get("chat", {}).get("service", {})

        for key in ["system_prompt", "greeting"]:
            if key not in service_config:
                raise ValueError(
                    f"{key} must be explicitly configured in config.yaml "
                    "under chat.service"
                )

        return service_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        return self._config.get("logging", {})
