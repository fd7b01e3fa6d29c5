"""Agents and the collaborator contracts they depend on."""

from dtnsim.agent.carry_only import (
    DEFAULT_RANGE,
    MAX_RANGE,
    AgentConfigurationError,
    CarryOnlyAgent,
)
from dtnsim.agent.interfaces import Mobility, Monitor, Scheduler

__all__ = [
    "DEFAULT_RANGE",
    "MAX_RANGE",
    "AgentConfigurationError",
    "CarryOnlyAgent",
    "Mobility",
    "Monitor",
    "Scheduler",
]
