"""Loading and lookup of studio plugins."""

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from mediavault.core.config import PluginSettings
from mediavault.core.exceptions import ConfigurationError
from mediavault.services.plugins.models import PluginContext

logger = logging.getLogger(__name__)

PluginOutput = Optional[Mapping[str, Any]]
PluginFunc = Callable[[PluginContext], Union[PluginOutput, Awaitable[PluginOutput]]]


@dataclass
class Plugin:
    """A registered plugin callable."""

    name: str
    func: PluginFunc
    args: Dict[str, Any] = field(default_factory=dict)


def load_callable(path: str) -> PluginFunc:
    """Import a callable from a ``package.module:attribute`` path."""
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(
            f"Plugin path '{path}' must look like 'package.module:callable'",
            config_key="plugins.registry",
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import plugin module '{module_name}': {e}",
            config_key="plugins.registry",
        ) from e

    func = getattr(module, attr, None)
    if not callable(func):
        raise ConfigurationError(
            f"'{attr}' in '{module_name}' is not callable",
            config_key="plugins.registry",
        )
    return func  # type: ignore[no-any-return]


class PluginRegistry:
    """Plugins by name and the plugin names bound to each event."""

    def __init__(self) -> None:
        self._plugins: Dict[str, Plugin] = {}
        self._events: Dict[str, List[str]] = {}

    @classmethod
    def from_settings(cls, settings: PluginSettings) -> "PluginRegistry":
        """Build a registry from configuration, importing every plugin."""
        registry = cls()
        for name, registration in settings.registry.items():
            registry.register(name, load_callable(registration.path), registration.args)
        for event, names in settings.events.items():
            registry.bind(event, names)
        logger.info(
            f"Loaded {len(registry._plugins)} plugins bound to "
            f"{len(registry._events)} events"
        )
        return registry

    def register(
        self, name: str, func: PluginFunc, args: Optional[Dict[str, Any]] = None
    ) -> None:
        """Register a plugin callable under a name."""
        self._plugins[name] = Plugin(name=name, func=func, args=dict(args or {}))

    def bind(self, event: str, names: List[str]) -> None:
        """Set the ordered plugin names that run for an event.

        Raises:
            ConfigurationError: If a name has not been registered
        """
        for name in names:
            if name not in self._plugins:
                raise ConfigurationError(
                    f"Event '{event}' references unregistered plugin '{name}'",
                    config_key=f"plugins.events.{event}",
                )
        self._events[event] = list(names)

    def plugins_for(self, event: str) -> List[Plugin]:
        """Get the plugins bound to an event, in run order."""
        return [self._plugins[name] for name in self._events.get(event, [])]
