"""Run statistics aggregated over the node population."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dtnsim.engine.scheduler import Scheduler


@dataclass(frozen=True)
class SimulationStats:
    """Snapshot of delivery progress and traffic counters."""

    tick: int
    time: float
    node_count: int
    injected: int
    delivered: int
    in_transit: int
    tx_count: int
    rx_count: int
    dup_count: int

    @property
    def delivery_ratio(self) -> float:
        return self.delivered / self.injected if self.injected else 0.0

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["delivery_ratio"] = self.delivery_ratio
        return data


def summarize(scheduler: Scheduler) -> SimulationStats:
    """Compute statistics for the scheduler's current state.

    A message counts as delivered once its destination holds it in hand,
    i.e. after the merge at the end of the tick it was handed over in.
    """
    delivered = 0
    for message in set(scheduler.messages):
        destination = scheduler.find(message.destination)
        if destination is not None and message in destination.accepted_messages():
            delivered += 1

    in_transit = sum(len(agent.pending_messages()) for agent in scheduler.agents)
    return SimulationStats(
        tick=scheduler.tick,
        time=scheduler.time,
        node_count=len(scheduler.agents),
        injected=len(set(scheduler.messages)),
        delivered=delivered,
        in_transit=in_transit,
        tx_count=sum(agent.tx_count for agent in scheduler.agents),
        rx_count=sum(agent.rx_count for agent in scheduler.agents),
        dup_count=sum(agent.dup_count for agent in scheduler.agents),
    )
