"""Frame projector: scheduler state to a visual Frame for rendering.

Each Frame is a snapshot of node positions, ranges and message state for
one tick.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

from dtnsim.engine.stats import summarize

if TYPE_CHECKING:
    from dtnsim.agent.carry_only import CarryOnlyAgent
    from dtnsim.engine.scheduler import Scheduler

CARRYING_COLOR = "#ff6b6b"  # Holding messages for someone else
ACCEPTED_COLOR = "#6bcb77"  # Has received messages addressed to it
IDLE_COLOR = "#4a90d9"


@dataclass
class NodeVisual:
    """Visual representation of a node: a dot with its range box."""

    id: int
    x: float
    y: float
    range: float
    cell: tuple[int, int]

    carrying: list[str] = field(default_factory=list)  # encoded message ids
    accepted: list[str] = field(default_factory=list)
    tx_count: int = 0
    rx_count: int = 0
    dup_count: int = 0
    color: str = IDLE_COLOR


@dataclass
class Frame:
    """A complete visual frame for one tick."""

    tick: int
    time: float
    nodes: list[NodeVisual] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=dict)


def project_node(agent: CarryOnlyAgent) -> NodeVisual:
    x, y = agent.position
    carrying = sorted(agent.pending_messages())
    accepted = sorted(agent.accepted_messages())
    if carrying:
        color = CARRYING_COLOR
    elif accepted:
        color = ACCEPTED_COLOR
    else:
        color = IDLE_COLOR
    return NodeVisual(
        id=agent.id,
        x=x,
        y=y,
        range=agent.range,
        cell=agent.cell(x, y),
        carrying=[m.encode() for m in carrying],
        accepted=[m.encode() for m in accepted],
        tx_count=agent.tx_count,
        rx_count=agent.rx_count,
        dup_count=agent.dup_count,
        color=color,
    )


def project(scheduler: Scheduler) -> Frame:
    """Project the scheduler's current state into a Frame."""
    return Frame(
        tick=scheduler.tick,
        time=scheduler.time,
        nodes=[project_node(agent) for agent in scheduler.agents],
        stats=summarize(scheduler).as_dict(),
    )


def frame_to_dict(frame: Frame) -> dict[str, Any]:
    """Convert a Frame to a JSON-serializable dict."""
    return asdict(frame)
