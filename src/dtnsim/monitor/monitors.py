"""Monitor implementations: sinks for forwarding, status and movement events."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dtnsim.agent.carry_only import CarryOnlyAgent
    from dtnsim.model.message import Message

logger = logging.getLogger(__name__)


class NullMonitor:
    """Discards every event."""

    def on_forward(self, sender: CarryOnlyAgent, receiver: CarryOnlyAgent, message: Message) -> None:
        pass

    def on_status_change(self, node: CarryOnlyAgent) -> None:
        pass

    def on_move(self, node: CarryOnlyAgent) -> None:
        pass


class LogMonitor:
    """Writes events to the log as a trace.

    Messages appear in their flat ``src-dst-seq`` form so traces can be
    compared with other tools.
    """

    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    def on_forward(self, sender: CarryOnlyAgent, receiver: CarryOnlyAgent, message: Message) -> None:
        logger.log(
            self.level,
            "forward %s %d -> %d",
            message.encode(),
            sender.id,
            receiver.id,
            extra={"event": "forward", "sender": sender.id, "receiver": receiver.id},
        )

    def on_status_change(self, node: CarryOnlyAgent) -> None:
        logger.log(
            self.level,
            "status %d carrying=%d tx=%d rx=%d dup=%d",
            node.id,
            len(node.messages()),
            node.tx_count,
            node.rx_count,
            node.dup_count,
        )

    def on_move(self, node: CarryOnlyAgent) -> None:
        if logger.isEnabledFor(self.level):
            x, y = node.position
            logger.log(self.level, "move %d (%.2f, %.2f)", node.id, x, y)


@dataclass(frozen=True)
class ForwardEvent:
    """One hand-off of a message between two nodes."""

    sender_id: int
    receiver_id: int
    message: Message


@dataclass
class RecordingMonitor:
    """Keeps events in memory for reporting and tests."""

    forwards: list[ForwardEvent] = field(default_factory=list)
    status_changes: Counter[int] = field(default_factory=Counter)
    moves: int = 0

    def on_forward(self, sender: CarryOnlyAgent, receiver: CarryOnlyAgent, message: Message) -> None:
        self.forwards.append(ForwardEvent(sender.id, receiver.id, message))

    def on_status_change(self, node: CarryOnlyAgent) -> None:
        self.status_changes[node.id] += 1

    def on_move(self, node: CarryOnlyAgent) -> None:
        self.moves += 1

    def forwards_of(self, message: Message) -> list[ForwardEvent]:
        return [event for event in self.forwards if event.message == message]

    def clear(self) -> None:
        self.forwards.clear()
        self.status_changes.clear()
        self.moves = 0
