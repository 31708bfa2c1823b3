"""Studio plugin hooks."""

from mediavault.services.plugins.models import (
    HookEvent,
    HookResult,
    PluginContext,
    StudioHook,
)
from mediavault.services.plugins.registry import Plugin, PluginRegistry, load_callable
from mediavault.services.plugins.runner import PluginHookRunner

__all__ = [
    "HookEvent",
    "HookResult",
    "Plugin",
    "PluginContext",
    "PluginHookRunner",
    "PluginRegistry",
    "StudioHook",
    "load_callable",
]
