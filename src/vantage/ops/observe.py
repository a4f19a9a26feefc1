"""
Observe/build control loop.

A build pass runs the user's build function with a fresh observer
manager. Queries executed during the pass are handed to the observer
plugins, which fetch data, and the build is run again with the new
observations. Whatever still needs data afterwards is reported.

Usage:
    outcome = await build_with_observations(build, registry, stored.observer)
    if outcome.needs_more_data:
        console.print(format_needs_data(outcome.needs_data))
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from vantage.core.config import ObserveConfig
from vantage.observers.context import build_context
from vantage.observers.manager import ObserverManagerDeployment
from vantage.observers.query import ExecutedQuery, print_query
from vantage.observers.registry import Observations, ObserverRegistry, patch_in_new_queries

logger = logging.getLogger(__name__)

T = TypeVar("T")

BuildPass = Callable[[ObserverManagerDeployment], Awaitable[T]]


@dataclass
class ObserveOutcome(Generic[T]):
    """Result of the final build pass plus the observation state that produced it."""

    result: T
    observations: Observations = field(default_factory=dict)
    needs_data: dict[str, list[ExecutedQuery]] = field(default_factory=dict)
    passes: int = 0

    @property
    def needs_more_data(self) -> bool:
        return any(self.needs_data.values())


async def _run_pass(build: BuildPass[T], manager: ObserverManagerDeployment) -> T:
    with build_context(manager):
        return await build(manager)


async def build_with_observations(
    build: BuildPass[T],
    registry: ObserverRegistry,
    observations: Observations | None = None,
    config: ObserveConfig | None = None,
) -> ObserveOutcome[T]:
    """
    Build, observe, and rebuild until no query needs data.

    Each pass gets its own manager, so the needs-data ledger only reflects
    the pass that produced it.

    Args:
        build: Async build function; receives the pass's manager
        registry: Observer plugins to observe with
        observations: Stored observations to seed the first pass
        config: Loop settings (max_observe_passes)

    Returns:
        ObserveOutcome for the last pass

    Raises:
        ObservationError: If any observer plugin fails
    """
    config = config or ObserveConfig()
    observations = dict(observations or {})

    manager = registry.make_manager(observations)
    result = await _run_pass(build, manager)
    passes = 1

    for round_no in range(1, config.max_observe_passes + 1):
        logger.info("Observe round %d", round_no)
        observations = await registry.observe(manager.executed_queries())
        manager = registry.make_manager(observations)
        result = await _run_pass(build, manager)
        passes += 1
        if not any(manager.executed_queries_that_needed_data().values()):
            break

    needs_data = manager.executed_queries_that_needed_data()
    patch_in_new_queries(observations, manager.executed_queries())
    if any(needs_data.values()):
        logger.warning("Observers still need data: %s", ", ".join(n for n, q in needs_data.items() if q))

    return ObserveOutcome(
        result=result, observations=observations, needs_data=needs_data, passes=passes
    )


def format_needs_data(needs_data: Mapping[str, Sequence[ExecutedQuery]]) -> str:
    """Human-readable report of queries that still need data."""
    blocks = []
    for name, queries in needs_data.items():
        if not queries:
            continue
        lines = [f"Observer '{name}' still needs data for these queries:"]
        for q in queries:
            line = f"    {' '.join(print_query(q.query).split())}"
            if q.variables is not None:
                line += f" //{json.dumps(q.variables)}"
            lines.append(line)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
