"""Configuration for prbot."""

from prbot.config.settings import (
    Settings,
    get_settings,
    get_merge_tool_config,
    load_merge_tool_config,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_merge_tool_config",
    "load_merge_tool_config",
]
