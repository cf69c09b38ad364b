"""Configuration management module."""

from .schema import EnhancerConfig, CompletionConfig, ServiceConfig, InteractiveConfig, DeploymentMode
from .manager import ConfigManager

__all__ = [
    "EnhancerConfig",
    "CompletionConfig",
    "ServiceConfig",
    "InteractiveConfig",
    "DeploymentMode",
    "ConfigManager",
]
