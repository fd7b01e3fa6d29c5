"""Tests for the engine layer: tick driver, run statistics, scenario builder."""

import pytest

from dtnsim.agent import CarryOnlyAgent
from dtnsim.config import SimulationConfig
from dtnsim.engine import Scheduler, summarize
from dtnsim.mobility import FixedMobility, RandomWaypointMobility
from dtnsim.model import CELL_SIZE, Message
from dtnsim.monitor import NullMonitor, RecordingMonitor
from dtnsim.scenario import create_messages, create_simulation


def make_pair(scheduler: Scheduler, monitor=None) -> tuple[CarryOnlyAgent, CarryOnlyAgent]:
    """Two stationary agents 10 units apart in the same cell."""
    monitor = monitor or NullMonitor()
    a = CarryOnlyAgent(mobility=FixedMobility(100, 100), scheduler=scheduler, monitor=monitor)
    b = CarryOnlyAgent(mobility=FixedMobility(110, 100), scheduler=scheduler, monitor=monitor)
    return a, b


class TestScheduler:
    """Tests for the Scheduler tick driver."""

    def test_initial_state(self):
        """A new scheduler has no agents, no grid and is at tick 0."""
        scheduler = Scheduler()

        assert scheduler.population_size() == 0
        assert scheduler.grid_index is None
        assert scheduler.tick == 0
        assert scheduler.time == 0.0
        assert scheduler.tick_delta() == 1.0

    def test_invalid_delta(self):
        """Tick delta must be positive."""
        with pytest.raises(ValueError):
            Scheduler(delta=0)

    def test_build_grid_registers_everyone(self):
        """build_grid() should hold every agent exactly once."""
        scheduler = Scheduler()
        make_pair(scheduler)
        grid = scheduler.build_grid()

        assert scheduler.grid_index is grid
        assert len(grid) == 2

    def test_build_grid_replaces_previous(self):
        """Each build starts from an empty index."""
        scheduler = Scheduler()
        make_pair(scheduler)
        first = scheduler.build_grid()
        second = scheduler.build_grid()

        assert first is not second
        assert len(second) == 2

    def test_grid_uses_fixed_cell_size(self):
        """The grid cell side is always CELL_SIZE; it cannot be overridden."""
        scheduler = Scheduler()
        make_pair(scheduler)

        assert scheduler.build_grid().cell_size == CELL_SIZE
        with pytest.raises(TypeError):
            Scheduler(cell_size=50)  # type: ignore[call-arg]

    def test_step_advances_clock(self):
        """step() should increment tick and time."""
        scheduler = Scheduler(delta=0.5)
        make_pair(scheduler)
        scheduler.step()
        scheduler.step()

        assert scheduler.tick == 2
        assert scheduler.time == 1.0

    def test_step_delivers_and_merges(self):
        """After one tick the destination holds the message in hand."""
        scheduler = Scheduler()
        a, b = make_pair(scheduler)
        msg = Message(a.id, b.id, 1)
        scheduler.inject(msg)

        handoffs = scheduler.step()

        assert handoffs == 1
        assert b.pending_merge == {}
        assert b.in_hand == {msg: 1}
        assert b.accepted_messages() == [msg]

    def test_one_hop_per_tick(self):
        """A message received in a tick cannot be forwarded until the next tick."""
        scheduler = Scheduler()
        monitor = RecordingMonitor()
        # b receives a message for c during the tick; b meets c in the same tick
        a, b = make_pair(scheduler, monitor)
        c = CarryOnlyAgent(mobility=FixedMobility(120, 100), scheduler=scheduler, monitor=monitor)
        relay = Message(99, c.id, 1)
        b.receive(a, relay)

        scheduler.step()

        assert monitor.forwards_of(relay) == []
        assert b.in_hand == {relay: 1}

    def test_inject_unknown_source(self):
        """Injecting a message from a non-existent node fails."""
        scheduler = Scheduler()
        make_pair(scheduler)

        with pytest.raises(KeyError):
            scheduler.inject(Message(50, 1, 1))

    def test_inject_records_message(self):
        """inject() places the message at its source and records it."""
        scheduler = Scheduler()
        a, b = make_pair(scheduler)
        msg = Message(a.id, b.id, 1)
        scheduler.inject(msg)

        assert scheduler.messages == [msg]
        assert a.in_hand == {msg: 1}

    def test_run_returns_total_handoffs(self):
        """run() should step the requested number of ticks."""
        scheduler = Scheduler()
        a, b = make_pair(scheduler)
        scheduler.inject(Message(a.id, b.id, 1))
        scheduler.inject(Message(b.id, a.id, 2))

        assert scheduler.run(5) == 2
        assert scheduler.tick == 5

    def test_find(self):
        """find() should look agents up by id."""
        scheduler = Scheduler()
        a, _ = make_pair(scheduler)

        assert scheduler.find(a.id) is a
        assert scheduler.find(12345) is None


class TestSummarize:
    """Tests for run statistics."""

    def test_empty_run(self):
        """A run with no messages has a zero delivery ratio."""
        scheduler = Scheduler()
        make_pair(scheduler)
        stats = summarize(scheduler)

        assert stats.injected == 0
        assert stats.delivered == 0
        assert stats.delivery_ratio == 0.0

    def test_counts_after_delivery(self):
        """Statistics should reflect delivered and in-transit messages."""
        scheduler = Scheduler()
        a, b = make_pair(scheduler)
        far = CarryOnlyAgent(
            mobility=FixedMobility(900, 900), scheduler=scheduler, monitor=NullMonitor()
        )
        scheduler.inject(Message(a.id, b.id, 1))
        scheduler.inject(Message(a.id, far.id, 2))
        scheduler.step()

        stats = summarize(scheduler)

        assert stats.tick == 1
        assert stats.node_count == 3
        assert stats.injected == 2
        assert stats.delivered == 1
        assert stats.in_transit == 1
        assert stats.tx_count == 1
        assert stats.rx_count == 1
        assert stats.dup_count == 0
        assert stats.delivery_ratio == 0.5

    def test_as_dict_includes_ratio(self):
        """as_dict() should include the derived delivery ratio."""
        scheduler = Scheduler()
        make_pair(scheduler)
        data = summarize(scheduler).as_dict()

        assert data["delivery_ratio"] == 0.0
        assert data["node_count"] == 2


class TestScenario:
    """Tests for the scenario builder."""

    def test_create_messages(self):
        """Messages should have distinct endpoints and sequential numbers."""
        import random

        messages = create_messages([1, 2, 3, 4], 6, random.Random(0))

        assert [m.sequence for m in messages] == [1, 2, 3, 4, 5, 6]
        assert all(m.source != m.destination for m in messages)
        assert all(m.source in {1, 2, 3, 4} and m.destination in {1, 2, 3, 4} for m in messages)

    def test_create_messages_needs_two_nodes(self):
        """Messages need at least two nodes."""
        import random

        with pytest.raises(ValueError):
            create_messages([1], 1, random.Random(0))

    def test_create_simulation(self):
        """create_simulation() should populate nodes and inject messages."""
        config = SimulationConfig(node_count=10, message_count=5, seed=1, comm_range=80)
        scheduler = create_simulation(config)

        assert [agent.id for agent in scheduler.agents] == list(range(1, 11))
        assert all(agent.range == 80 for agent in scheduler.agents)
        assert len(scheduler.messages) == 5
        for message in scheduler.messages:
            assert message in scheduler.find(message.source).in_hand

    def test_create_simulation_uses_mobility_kind(self):
        """The configured mobility model should be used for every node."""
        config = SimulationConfig(node_count=3, message_count=0, mobility="fixed")
        scheduler = create_simulation(config)

        assert all(isinstance(agent.mobility, FixedMobility) for agent in scheduler.agents)

    def test_default_mobility_is_random_waypoint(self):
        """Random waypoint is the default model."""
        scheduler = create_simulation(SimulationConfig(node_count=2, message_count=0))

        assert isinstance(scheduler.agents[0].mobility, RandomWaypointMobility)

    def test_same_seed_same_run(self):
        """Runs with the same seed should be identical."""
        config = SimulationConfig(node_count=20, message_count=10, seed=7)
        first = create_simulation(config)
        second = create_simulation(config)
        first.run(50)
        second.run(50)

        assert [a.position for a in first.agents] == [a.position for a in second.agents]
        assert summarize(first) == summarize(second)

    def test_single_handoff_per_message(self):
        """In a carry-only run no message instance is handed off more than once."""
        monitor = RecordingMonitor()
        config = SimulationConfig(
            node_count=30,
            message_count=20,
            seed=3,
            field_width=400,
            field_height=400,
            comm_range=60,
        )
        scheduler = create_simulation(config, monitor=monitor)
        scheduler.run(300)

        for message in scheduler.messages:
            assert len(monitor.forwards_of(message)) <= 1
        for agent in scheduler.agents:
            assert all(count >= 0 for count in agent.in_hand.values())
            assert agent.dup_count == 0

    def test_handoffs_only_to_destination(self):
        """Every recorded hand-off goes to the message's destination."""
        monitor = RecordingMonitor()
        config = SimulationConfig(
            node_count=20, message_count=15, seed=11, field_width=300, field_height=300
        )
        scheduler = create_simulation(config, monitor=monitor)
        scheduler.run(200)

        assert monitor.forwards
        for event in monitor.forwards:
            assert event.receiver_id == event.message.destination
            assert event.sender_id == event.message.source
        assert summarize(scheduler).delivered == len(monitor.forwards)
