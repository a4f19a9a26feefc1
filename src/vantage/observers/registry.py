"""
Observer plugin registry.

The registry is an explicit object built at startup and handed to
whatever constructs observer managers, rather than a module-level table
filled in as a side effect of imports.

Usage:
    registry = ObserverRegistry()
    registry.register(MockObserver())

    manager = registry.make_manager(stored_observations)
    ...
    observations = await registry.observe(manager.executed_queries())
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from vantage.core.errors import DuplicateObserverError, ErrorContext, ObservationError
from vantage.observers.manager import ObserverManagerDeployment
from vantage.observers.plugin import ObserverPlugin, ObserverRef, ObserverResponse, observer_name
from vantage.observers.query import ExecutedQuery

logger = logging.getLogger(__name__)


@dataclass
class ObserverObservations:
    """Observed state for one observer plus the queries it was fetched for."""

    observations: ObserverResponse = field(default_factory=ObserverResponse)
    queries: list[ExecutedQuery] = field(default_factory=list)


Observations = dict[str, ObserverObservations]


class ObserverRegistry:
    """Named observer plugins available to a deployment."""

    def __init__(self) -> None:
        self._plugins: dict[str, ObserverPlugin] = {}
        self._names_by_type: dict[type, str] = {}

    def register(self, plugin: ObserverPlugin, name: str | None = None) -> str:
        """
        Register a plugin.

        Args:
            plugin: Plugin instance
            name: Registered name (defaults to the plugin's declared
                ``observer_name``, then its class name)

        Returns:
            The name the plugin was registered under

        Raises:
            DuplicateObserverError: If the name is taken
        """
        plugin_cls = type(plugin)
        name = name or plugin.observer_name or plugin_cls.__name__
        if name in self._plugins:
            raise DuplicateObserverError(
                f"Attempt to register observer with duplicate name '{name}'",
                ErrorContext(observer=name),
            )
        self._plugins[name] = plugin

        # The first registration of a class makes it a name holder within this registry
        self._names_by_type.setdefault(plugin_cls, name)
        logger.debug("Registered observer plugin %s as %s", plugin_cls.__name__, name)
        return name

    def find(self, ref: ObserverRef) -> ObserverPlugin | None:
        return self._plugins.get(observer_name(ref, self._names_by_type))

    @property
    def names(self) -> list[str]:
        return list(self._plugins)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    def make_manager(self, observations: Observations | None = None) -> ObserverManagerDeployment:
        """Create a manager with every plugin registered against its stored observations."""
        observations = observations or {}
        manager = ObserverManagerDeployment()
        for name, plugin in self._plugins.items():
            stored = observations.get(name)
            manager.register_schema(
                name, plugin.schema, stored.observations if stored else ObserverResponse()
            )
        for holder, name in self._names_by_type.items():
            manager.register_holder(holder, name)
        return manager

    async def observe(
        self,
        executed_queries: Mapping[str, Sequence[ExecutedQuery]],
        observer_names: Iterable[str] | None = None,
    ) -> Observations:
        """
        Run the named plugins' ``observe`` concurrently.

        Args:
            executed_queries: Queries to hand each plugin, by observer name
            observer_names: Plugins to run (default: all registered)

        Returns:
            Fresh observations for every plugin that was run

        Raises:
            ObservationError: If any plugin failed; carries the partial results
        """
        names = list(self._plugins) if observer_names is None else list(observer_names)
        ret: Observations = {}
        errors: list[str] = []

        async def run(name: str, plugin: ObserverPlugin) -> None:
            queries = list(executed_queries.get(name, []))
            try:
                response = await plugin.observe(queries)
            except Exception as e:
                msg = f"Error observing for {name}: {e}"
                logger.warning(msg)
                errors.append(msg)
                return
            ret[name] = ObserverObservations(observations=response, queries=queries)

        tasks = []
        for name in names:
            plugin = self._plugins.get(name)
            if plugin is None:
                logger.debug("Skipping unknown observer %s", name)
                continue
            tasks.append(run(name, plugin))

        logger.info("Observing %d observer(s)", len(tasks))
        await asyncio.gather(*tasks)

        if errors:
            raise ObservationError(
                "Errors during observations:\n" + "\n".join(errors), observations=ret
            )
        return ret


def patch_in_new_queries(
    observations: Observations, executed_queries: Mapping[str, Sequence[ExecutedQuery]]
) -> None:
    """Replace each observer's stored queries with the latest executed ones."""
    for name, queries in executed_queries.items():
        entry = observations.get(name)
        if entry is None:
            entry = observations[name] = ObserverObservations()
        entry.queries = list(queries)
