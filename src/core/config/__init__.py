"""
Pipeline configuration loading.
"""

from .pipeline_config import (
    CodeTables,
    ConfigError,
    PipelineConfig,
    PipelineConfigLoader,
    load_config,
)

__all__ = [
    "CodeTables",
    "ConfigError",
    "PipelineConfig",
    "PipelineConfigLoader",
    "load_config",
]
