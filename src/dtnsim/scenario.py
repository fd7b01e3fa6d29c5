"""Scenario builder: a populated scheduler ready to run.

Nodes are created with the configured mobility model and range, then
``message_count`` messages with random distinct source/destination pairs
are injected before the first tick.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from dtnsim.agent.carry_only import CarryOnlyAgent
from dtnsim.config import SimulationConfig
from dtnsim.engine.scheduler import Scheduler
from dtnsim.mobility import create_mobility
from dtnsim.model.message import Message
from dtnsim.monitor.monitors import NullMonitor

if TYPE_CHECKING:
    from dtnsim.agent.interfaces import Monitor

logger = logging.getLogger(__name__)


def create_messages(node_ids: list[int], count: int, rng: random.Random) -> list[Message]:
    """Draw ``count`` messages between distinct random nodes, sequence numbers 1..count."""
    if count and len(node_ids) < 2:
        raise ValueError("At least two nodes are needed to create messages")
    messages = []
    for sequence in range(1, count + 1):
        source, destination = rng.sample(node_ids, 2)
        messages.append(Message(source=source, destination=destination, sequence=sequence))
    return messages


def create_simulation(
    config: SimulationConfig | None = None,
    monitor: Monitor | None = None,
) -> Scheduler:
    """Build a scheduler populated per ``config``.

    Args:
        config: Simulation parameters. Defaults to a fresh SimulationConfig.
        monitor: Event sink shared by all agents. Defaults to NullMonitor.

    Returns:
        Scheduler at tick 0 with agents registered and messages injected.
    """
    if config is None:
        config = SimulationConfig()
    if monitor is None:
        monitor = NullMonitor()

    rng = random.Random(config.seed)
    scheduler = Scheduler(delta=config.tick_delta)
    for _ in range(config.node_count):
        CarryOnlyAgent(
            mobility=create_mobility(config.mobility, config, rng),
            scheduler=scheduler,
            monitor=monitor,
            range=config.comm_range,
        )

    node_ids = [agent.id for agent in scheduler.agents]
    for message in create_messages(node_ids, config.message_count, rng):
        scheduler.inject(message)

    logger.info(
        "Created simulation: %d nodes, %d messages, mobility=%s",
        len(scheduler.agents),
        len(scheduler.messages),
        config.mobility.value,
    )
    return scheduler
