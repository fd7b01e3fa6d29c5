"""Carry-only agent: single-copy DTN routing.

A node carries each message until it personally meets the message's
destination and then hands it over once. It never copies a message to an
intermediate relay.

Received messages go into ``pending_merge`` first and only become forwardable
after the driver calls :meth:`CarryOnlyAgent.merge` at the end of the tick,
so a message moves at most one hop per tick.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dtnsim.model.grid import CELL_SIZE, GridNotBuiltError, cell_for

if TYPE_CHECKING:
    from dtnsim.agent.interfaces import Mobility, Monitor, Scheduler
    from dtnsim.model.grid import Cell, SpatialGridIndex
    from dtnsim.model.message import Message

logger = logging.getLogger(__name__)

DEFAULT_RANGE = 50.0
MAX_RANGE = CELL_SIZE


class AgentConfigurationError(ValueError):
    """Raised when an agent cannot be constructed from the given options."""


class CarryOnlyAgent:
    """A mobile node running the carry-only routing policy.

    Args:
        mobility: Position provider (required).
        scheduler: Tick driver the agent registers with (required).
        monitor: Event sink (required).
        id: Node id. Defaults to the scheduler's population size + 1.
        range: Communication range, 0 < range <= MAX_RANGE.

    Raises:
        AgentConfigurationError: If a collaborator is missing or the range is invalid.
    """

    def __init__(
        self,
        *,
        mobility: Mobility | None = None,
        scheduler: Scheduler | None = None,
        monitor: Monitor | None = None,
        id: int | None = None,
        range: float | None = DEFAULT_RANGE,
    ) -> None:
        if mobility is None:
            raise AgentConfigurationError("Mobility must be specified")
        if scheduler is None:
            raise AgentConfigurationError("Scheduler must be specified")
        if monitor is None:
            raise AgentConfigurationError("Monitor must be specified")
        if range is None:
            range = DEFAULT_RANGE
        if range <= 0:
            raise AgentConfigurationError(f"range must be positive, got {range}")
        if range > MAX_RANGE:
            raise AgentConfigurationError(f"range cannot exceed MAX_RANGE ({MAX_RANGE}), got {range}")

        self.id: int = id if id is not None else scheduler.population_size() + 1
        self.range = float(range)
        self.mobility = mobility
        self.scheduler = scheduler
        self.monitor = monitor

        # Routing state
        self.last_neighbors: list[CarryOnlyAgent] = []
        self.in_hand: dict[Message, int] = {}
        self.pending_merge: dict[Message, int] = {}
        self.delivered: dict[Message, int] = {}

        # Counters
        self.tx_count = 0
        self.rx_count = 0
        self.dup_count = 0

        scheduler.register_node(self)

    def __repr__(self) -> str:
        x, y = self.position
        return f"CarryOnlyAgent(id={self.id}, range={self.range}, pos=({x:.1f}, {y:.1f}))"

    @property
    def position(self) -> tuple[float, float]:
        return self.mobility.current_position()

    # Spatial index

    def _grid(self) -> SpatialGridIndex:
        grid = self.scheduler.grid_index
        if grid is None:
            raise GridNotBuiltError(
                "The grid index has not been built for this tick; "
                "the scheduler must build it before agents query neighbors"
            )
        if grid.cell_size != CELL_SIZE:
            raise AgentConfigurationError(
                f"grid cell size {grid.cell_size} differs from CELL_SIZE ({CELL_SIZE})"
            )
        return grid

    def cell(self, x: float | None = None, y: float | None = None) -> Cell:
        """Return the grid cell for (x, y), defaulting to the agent's own position."""
        if x is None or y is None:
            px, py = self.position
            x = px if x is None else x
            y = py if y is None else y
        return cell_for(x, y)

    def cache_cell(self) -> None:
        """Register this agent in the shared grid under its current cell."""
        grid = self._grid()
        x, y = self.position
        grid.register(self, self.cell(x, y))

    def neighbors(self) -> list[CarryOnlyAgent]:
        """Agents within communication range this tick.

        Looks only at the 3x3 block of cells around the agent's own cell and
        accepts an agent when it lies within ``range`` on both axes.

        Raises:
            GridNotBuiltError: If the scheduler has no grid index yet.
            AgentConfigurationError: If the grid was built with another cell size.
        """
        grid = self._grid()
        px, py = self.position
        found: list[CarryOnlyAgent] = []
        for agent in grid.neighborhood(self.cell(px, py)):
            if agent is self:
                continue
            qx, qy = agent.position
            if abs(px - qx) > self.range or abs(py - qy) > self.range:
                continue
            found.append(agent)
        return found

    def encounters(self) -> list[CarryOnlyAgent]:
        """Agents that are neighbors now but were not on the previous call.

        Call exactly once per tick; it replaces ``last_neighbors``.
        """
        current = self.neighbors()
        previous_ids = {agent.id for agent in self.last_neighbors}
        new: dict[int, CarryOnlyAgent] = {}
        for agent in current:
            if agent.id not in previous_ids:
                new.setdefault(agent.id, agent)
        self.last_neighbors = current
        return list(new.values())

    # Message store

    def add_message(self, message: Message) -> None:
        """Originate ``message`` at this agent; it is forwardable immediately."""
        self.in_hand[message] = self.in_hand.get(message, 0) + 1
        logger.debug("Agent %d originated message %s", self.id, message)
        self.monitor.on_status_change(self)

    def receive(self, sender: CarryOnlyAgent, message: Message) -> None:
        """Queue ``message`` from ``sender``; it is not forwardable until :meth:`merge`.

        A reception counts as a duplicate only if a copy was already merged
        into ``in_hand`` on an earlier tick.
        """
        self.pending_merge[message] = self.pending_merge.get(message, 0) + 1
        self.rx_count += 1
        if self.in_hand.get(message, 0) > 0:
            self.dup_count += 1
        self.monitor.on_status_change(self)

    def send(self, receiver: CarryOnlyAgent, message: Message) -> None:
        """Hand ``message`` to ``receiver`` synchronously."""
        receiver.receive(self, message)
        self.tx_count += 1
        self.monitor.on_forward(self, receiver, message)
        self.monitor.on_status_change(self)

    def merge(self) -> int:
        """Fold this tick's receptions into ``in_hand``.

        Returns:
            Number of message copies merged.
        """
        merged = 0
        for message, count in self.pending_merge.items():
            self.in_hand[message] = self.in_hand.get(message, 0) + count
            merged += count
        self.pending_merge.clear()
        return merged

    def messages(self) -> list[Message]:
        """Messages with at least one copy in hand."""
        return [m for m, count in self.in_hand.items() if count > 0]

    def pending_messages(self) -> list[Message]:
        """Carried messages still to be delivered to someone else."""
        return [
            m for m in self.messages() if m.destination != self.id and m not in self.delivered
        ]

    def accepted_messages(self) -> list[Message]:
        """Messages that have reached this agent as their destination."""
        return [m for m in self.messages() if m.destination == self.id]

    # Routing

    def forward(self) -> int:
        """Hand carried messages to newly met agents that are their destination.

        Returns:
            Number of hand-offs performed.
        """
        handoffs = 0
        for agent in self.encounters():
            for message in self.pending_messages():
                if message.destination != agent.id:
                    continue
                self.send(agent, message)
                self.in_hand[message] -= 1
                self.delivered[message] = self.delivered.get(message, 0) + 1
                handoffs += 1
                logger.debug("Agent %d delivered %s to agent %d", self.id, message, agent.id)
        return handoffs

    def advance(self) -> int:
        """Move for one tick and forward to new encounters.

        Does not merge; the scheduler merges every agent after all have advanced.
        """
        self.mobility.move(self.scheduler.tick_delta())
        self.monitor.on_move(self)
        return self.forward()
