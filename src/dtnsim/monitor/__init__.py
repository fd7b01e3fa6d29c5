"""Monitors: pluggable sinks for simulation events."""

from dtnsim.monitor.monitors import ForwardEvent, LogMonitor, NullMonitor, RecordingMonitor

__all__ = ["ForwardEvent", "LogMonitor", "NullMonitor", "RecordingMonitor"]
