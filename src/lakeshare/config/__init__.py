from lakeshare.config.load import (
    ParameterDefinition,
    Settings,
    fallback_settings,
    load_config,
    load_settings,
)

__all__ = ["ParameterDefinition", "Settings", "fallback_settings", "load_config", "load_settings"]
