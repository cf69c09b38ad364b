"""Configuration schema using Pydantic models.

This module defines the configuration schema for Prompt Enhancer using Pydantic models.
Each configuration option includes a description explaining its purpose.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DeploymentMode(str, Enum):
    """How the interactive front-end reaches the language model.

    - direct: call the upstream completion API from this process
    - proxy: send prompts to a running Prompt Enhancer service
    """
    DIRECT = "direct"
    PROXY = "proxy"


class CompletionConfig(BaseModel):
    """Upstream completion API configuration.

    API Key Resolution Priority:
    1. api_key - Direct value (if non-empty)
    2. api_key_helper - Output of shell command
    3. api_key_env_var - Value from environment variable
    """
    api_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for OpenAI-compatible API. Change for local LLMs like Ollama (http://localhost:11434/v1)"
    )
    api_key: str = Field(
        default="",
        description="Direct API key value. Highest priority. Leave empty to use api_key_helper or api_key_env_var."
    )
    api_key_helper: Optional[str] = Field(
        default=None,
        description="Shell command to retrieve API key. Runs with 30s timeout. Example: 'op read op://vault/openai/key' for 1Password"
    )
    api_key_env_var: Optional[str] = Field(
        default="OPENAI_API_KEY",
        description="Name of environment variable containing API key. Lowest priority."
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="LLM model name used to rewrite prompts. Examples: 'gpt-4o-mini', 'gpt-4o', 'llama3' (for Ollama)"
    )
    max_tokens: int = Field(
        default=1000,
        gt=0,
        description="Maximum number of tokens the model may generate for the enhanced prompt."
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature. Kept low so rewrites stay close to deterministic."
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for the upstream API before giving up."
    )
    system_prompt_file: Optional[str] = Field(
        default=None,
        description="Path to file containing a replacement system prompt"
    )
    custom_system_prompt: Optional[str] = Field(
        default=None,
        description="Inline custom system prompt. If set, overrides system_prompt_file."
    )


class ServiceConfig(BaseModel):
    """HTTP service configuration."""
    host: str = Field(
        default="127.0.0.1",
        description="Interface the service binds to. Use 0.0.0.0 to accept remote connections."
    )
    port: int = Field(
        default=3000,
        gt=0,
        lt=65536,
        description="TCP port the service listens on."
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the service from a browser."
    )

    # Command-line overrides are assigned after loading
    model_config = {"validate_assignment": True}


class InteractiveConfig(BaseModel):
    """Interactive (editor-style) front-end configuration."""
    mode: DeploymentMode = Field(
        default=DeploymentMode.DIRECT,
        description="'direct' calls the completion API, 'proxy' goes through the HTTP service at service_url"
    )
    service_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the Prompt Enhancer service, used in proxy mode."
    )
    state_file: str = Field(
        default="~/.config/prompt-enhancer/state.json",
        description="File holding one-time flags such as whether the welcome notice was shown."
    )
    documents_dir: str = Field(
        default="./enhanced",
        description="Directory where enhanced prompts opened as new documents are written."
    )


class EnhancerConfig(BaseModel):
    """Main configuration for Prompt Enhancer.

    This is the root configuration object containing all settings.
    Save as prompt_enhancer.json in your project directory.
    """
    completion: CompletionConfig = Field(
        default_factory=CompletionConfig,
        description="Upstream completion API settings"
    )
    service: ServiceConfig = Field(
        default_factory=ServiceConfig,
        description="HTTP service settings"
    )
    interactive: InteractiveConfig = Field(
        default_factory=InteractiveConfig,
        description="Interactive front-end settings"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging verbosity. Options: DEBUG, INFO, WARNING, ERROR. Use DEBUG for troubleshooting."
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "completion": {
                        "api_base_url": "https://api.openai.com/v1",
                        "api_key_env_var": "OPENAI_API_KEY",
                        "model": "gpt-4o-mini",
                        "max_tokens": 1000
                    },
                    "service": {
                        "port": 3000
                    },
                    "interactive": {
                        "mode": "direct",
                        "service_url": "http://localhost:3000"
                    },
                    "log_level": "INFO"
                }
            ]
        }
    }
