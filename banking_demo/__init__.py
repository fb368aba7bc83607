"""
Banking Telemetry Demo

A minimal banking HTTP service whose every operation is instrumented through
a single telemetry event type fanned out to line, JSON and HTTP Event
Collector sinks.
"""

__version__ = "1.0.0"
