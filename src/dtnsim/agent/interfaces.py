"""Collaborator contracts consumed by an agent.

An agent holds one concrete implementation of each per run. Any object with
the right methods will do; none of these need to be subclassed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dtnsim.model.grid import SpatialGridIndex
    from dtnsim.model.message import Message


@runtime_checkable
class Mobility(Protocol):
    """Owns and updates a node's position."""

    def current_position(self) -> tuple[float, float]: ...

    def move(self, delta: float) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Tick driver: owns the node population and the shared grid index."""

    @property
    def grid_index(self) -> SpatialGridIndex | None: ...

    def population_size(self) -> int: ...

    def register_node(self, node: Any) -> None: ...

    def tick_delta(self) -> float: ...


@runtime_checkable
class Monitor(Protocol):
    """Receives simulation events for visualization or reporting."""

    def on_forward(self, sender: Any, receiver: Any, message: Message) -> None: ...

    def on_status_change(self, node: Any) -> None: ...

    def on_move(self, node: Any) -> None: ...
