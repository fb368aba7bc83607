"""
Telemetry Sinks Module

Destinations for telemetry events behind one interface. Each sink owns its
formatting: a human readable line log, a structured JSON log, the HTTP Event
Collector forwarder, and an in-memory capture for tests.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from .events import TelemetryDispatcher, TelemetryEvent
from .hec_client import HecClient
from .logging_config import JSONFormatter, LineFormatter, log_action, setup_logging


class TelemetrySink(ABC):
    """Abstract telemetry sink"""

    name = "sink"

    @abstractmethod
    def emit(self, event: TelemetryEvent) -> None:
        """Write or forward one event"""
        pass

    def close(self) -> None:
        """Release sink resources (default no-op)"""
        pass


class LineLogSink(TelemetrySink):
    """One ``key=value`` line per event, e.g.
    ``BANKING_TRANSFER_SUCCESS user=john_doe amount=100.00 fromAccount=checking``"""

    name = "line"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("banking_demo.line")

    def format_event(self, event: TelemetryEvent) -> str:
        if event.is_debug:
            return event.message or ""
        fields = " ".join(f"{key}={value}" for key, value in event.data.items())
        line = f"{event.event_type} user={event.user_id}"
        return f"{line} {fields}" if fields else line

    def emit(self, event: TelemetryEvent) -> None:
        self.logger.log(getattr(logging, event.level), self.format_event(event))


class JsonLogSink(TelemetrySink):
    """Structured JSON record per event via :class:`JSONFormatter`"""

    name = "json"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("banking_demo.json")

    def emit(self, event: TelemetryEvent) -> None:
        if event.is_debug:
            log_action(
                self.logger, event.level, event.message or "",
                correlation_id=event.correlation_id,
                event_type=event.event_type,
            )
            return
        log_action(
            self.logger, event.level, event.event_type.lower(),
            user_id=event.user_id,
            correlation_id=event.correlation_id,
            event_type=event.event_type,
            extra=event.data,
        )


class HecSink(TelemetrySink):
    """Forward events to an HTTP Event Collector"""

    name = "hec"

    def __init__(self, client: HecClient):
        self.client = client

    def emit(self, event: TelemetryEvent) -> None:
        if event.is_debug:
            self.client.debug(event.message or "")
        else:
            self.client.log(event.event_type, event.actor, event.data)

    def close(self) -> None:
        self.client.close()


class InMemorySink(TelemetrySink):
    """Captures events for testing"""

    name = "memory"

    def __init__(self):
        self.events: List[TelemetryEvent] = []
        self._lock = threading.RLock()

    def emit(self, event: TelemetryEvent) -> None:
        with self._lock:
            self.events.append(event)

    def get_events(self, event_type: Optional[str] = None) -> List[TelemetryEvent]:
        """Get all events or events of one type"""
        with self._lock:
            if event_type:
                return [e for e in self.events if e.event_type == event_type]
            return self.events.copy()

    def event_types(self) -> List[str]:
        with self._lock:
            return [e.event_type for e in self.events]

    def clear(self) -> None:
        with self._lock:
            self.events.clear()


def create_dispatcher(config, hec_client: Optional[HecClient] = None,
                      extra_sinks: Optional[List[TelemetrySink]] = None) -> TelemetryDispatcher:
    """
    Build the telemetry dispatcher for a configuration.

    Args:
        config: BankingDemoConfig; ``telemetry_sinks`` picks line/json/hec
        hec_client: Collector client to use instead of one built from config
        extra_sinks: Additional sinks appended after the configured ones

    Returns:
        Dispatcher with one sink per configured name
    """
    builders: Dict[str, Callable[[], TelemetrySink]] = {
        "line": lambda: LineLogSink(
            setup_logging(config.log_level, "banking_demo.line", LineFormatter("LINE"))
        ),
        "json": lambda: JsonLogSink(
            setup_logging(config.log_level, "banking_demo.json", JSONFormatter())
        ),
        "hec": lambda: HecSink(hec_client or HecClient.from_config(config)),
    }

    # The collector client's own local lines use the line format
    setup_logging(config.log_level, "banking_demo.hec", LineFormatter("HEC"))

    sinks: List[TelemetrySink] = []
    for name in config.sink_names:
        builder = builders.get(name)
        if builder is None:
            raise ValueError(f"Unknown telemetry sink: {name}")
        sinks.append(builder())
    sinks.extend(extra_sinks or [])
    return TelemetryDispatcher(sinks)
