"""Simulation engine: tick driver and run statistics."""

from dtnsim.engine.scheduler import Scheduler
from dtnsim.engine.stats import SimulationStats, summarize

__all__ = ["Scheduler", "SimulationStats", "summarize"]
