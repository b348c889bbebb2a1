"""Agent lifecycle registry.

Holds at most one live agent instance per agent identity:

  1. ``create_if_absent`` collapses concurrent creation attempts for the same
     identity (single-flight); a second caller arriving while creation is in
     flight gets ``AgentBusyError``.
  2. ``dispose`` tears an instance down and forgets it.
  3. A background sweep disposes instances idle for longer than the
     inactivity threshold.

All state is mutated between awaits on one event loop, so no locks are used.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

from src.domain.exceptions import AgentBusyError

logger = logging.getLogger(__name__)

DEFAULT_INACTIVITY_THRESHOLD_SECONDS = 8 * 60 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 5.0


class ManagedAgent(Protocol):
    """What the registry needs from an agent instance."""

    agent_id: str

    @property
    def last_interaction(self) -> float: ...

    async def dispose(self) -> None: ...


AgentInitializer = Callable[[], Awaitable[ManagedAgent]]


class AgentRegistry:
    """Registry of live agent instances keyed by agent id.

    Usage::

        registry = AgentRegistry(inactivity_threshold=8 * 3600)
        registry.start()
        agent = await registry.create_if_absent(agent_id, factory)
        ...
        await registry.dispose(agent_id)
        await registry.stop()
    """

    def __init__(
        self,
        inactivity_threshold: float = DEFAULT_INACTIVITY_THRESHOLD_SECONDS,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._agents: dict[str, ManagedAgent] = {}
        self._pending: set[str] = set()
        self._inactivity_threshold = inactivity_threshold
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._sweep_task: asyncio.Task | None = None

    def get(self, agent_id: str) -> ManagedAgent | None:
        return self._agents.get(agent_id)

    def is_pending(self, agent_id: str) -> bool:
        return agent_id in self._pending

    def agent_ids(self) -> list[str]:
        return list(self._agents)

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    async def create_if_absent(self, agent_id: str, factory: AgentInitializer) -> ManagedAgent:
        """Return the live instance for ``agent_id``, creating it if needed.

        Raises:
            AgentBusyError: creation for ``agent_id`` is already in flight
            Exception: whatever ``factory`` raised; pending state is cleared
        """
        existing = self._agents.get(agent_id)
        if existing is not None:
            return existing
        if agent_id in self._pending:
            raise AgentBusyError(agent_id)

        self._pending.add(agent_id)
        try:
            agent = await factory()
        finally:
            self._pending.discard(agent_id)

        winner = self._agents.get(agent_id)
        if winner is not None:
            # Registered through another path while we were initializing.
            logger.info(f"[AgentRegistry] Discarding duplicate instance for {agent_id}")
            await agent.dispose()
            return winner

        self._agents[agent_id] = agent
        logger.info(f"[AgentRegistry] Registered agent {agent_id} (active={len(self._agents)})")
        return agent

    async def dispose(self, agent_id: str) -> bool:
        """Tear down and remove ``agent_id``. Returns False if it was not active."""
        agent = self._agents.get(agent_id)
        if agent is None:
            return False
        try:
            await agent.dispose()
        finally:
            self._agents.pop(agent_id, None)
        logger.info(f"[AgentRegistry] Disposed agent {agent_id}")
        return True

    async def sweep_idle(self, now: float | None = None) -> list[str]:
        """Dispose every agent idle longer than the inactivity threshold.

        Disposal failures are logged; the failing agent is still removed and
        the sweep moves on to the next one.

        Returns:
            Ids of the evicted agents
        """
        now = self._clock() if now is None else now
        expired = [
            agent_id
            for agent_id, agent in self._agents.items()
            if now - agent.last_interaction > self._inactivity_threshold
        ]
        for agent_id in expired:
            logger.info(f"[AgentRegistry] Disposing AI Agent due to inactivity: {agent_id}")
            try:
                await self.dispose(agent_id)
            except Exception as e:
                logger.error(f"[AgentRegistry] Failed to dispose idle agent {agent_id}: {e}")
        return expired

    def start(self) -> None:
        """Start the periodic idle sweep on the running event loop."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return

        async def sweep_loop() -> None:
            while True:
                await asyncio.sleep(self._sweep_interval)
                try:
                    await self.sweep_idle()
                except Exception as e:
                    logger.error(f"[AgentRegistry] Idle sweep failed: {e}", exc_info=True)

        self._sweep_task = asyncio.create_task(sweep_loop())
        logger.info(
            f"[AgentRegistry] Idle sweep started (interval={self._sweep_interval}s, "
            f"threshold={self._inactivity_threshold}s)"
        )

    async def stop(self) -> None:
        """Stop the sweep and dispose all remaining agents."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

        for agent_id in list(self._agents):
            try:
                await self.dispose(agent_id)
            except Exception as e:
                logger.warning(f"[AgentRegistry] Error disposing {agent_id} on shutdown: {e}")
