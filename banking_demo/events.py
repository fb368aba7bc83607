"""
Telemetry Event Module

One internal event type for everything the banking operations report. Events
are published once through a dispatcher that fans them out to the configured
sinks; each sink owns its own output format.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import uuid

if TYPE_CHECKING:
    from .sinks import TelemetrySink


class BankingEvent(Enum):
    """Well-known telemetry event types. Sinks also accept free-form strings."""

    # Login
    LOGIN_INITIATED = "BANKING_LOGIN_INITIATED"
    LOGIN_FAILED = "BANKING_LOGIN_FAILED"
    LOGIN_SUCCESS = "BANKING_LOGIN_SUCCESS"

    # Transfer
    TRANSFER_INITIATED = "BANKING_TRANSFER_INITIATED"
    TRANSFER_FAILED = "BANKING_TRANSFER_FAILED"
    TRANSFER_SUCCESS = "BANKING_TRANSFER_SUCCESS"

    # Balance
    BALANCE_CHECK = "BANKING_BALANCE_CHECK"
    BALANCE_FAILED = "BANKING_BALANCE_FAILED"
    BALANCE_RESPONSE = "BANKING_BALANCE_RESPONSE"

    # Transaction history
    TRANSACTION_HISTORY = "BANKING_TRANSACTION_HISTORY"
    TRANSACTION_HISTORY_INVALID_DATE = "BANKING_TRANSACTION_HISTORY_INVALID_DATE"
    TRANSACTION_HISTORY_SUCCESS = "BANKING_TRANSACTION_HISTORY_SUCCESS"

    # Logout
    LOGOUT = "BANKING_LOGOUT"
    LOGOUT_SUCCESS = "BANKING_LOGOUT_SUCCESS"

    # System
    APP_STARTUP = "BANKING_APP_STARTUP"
    DEBUG = "BANKING_DEBUG"


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def new_correlation_id() -> str:
    """Random 128-bit correlation token, hex encoded"""
    return uuid.uuid4().hex


def event_type_name(event_type: Union[BankingEvent, str]) -> str:
    return event_type.value if isinstance(event_type, BankingEvent) else str(event_type)


@dataclass
class TelemetryEvent:
    """A single telemetry emission"""
    event_type: str
    actor: Dict[str, Any] = field(default_factory=dict)  # id / username / name
    data: Dict[str, Any] = field(default_factory=dict)
    correlation_id: str = field(default_factory=new_correlation_id)
    level: str = "INFO"
    message: Optional[str] = None  # debug events carry a message instead of data
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        self.level = self.level.upper()
        if self.level not in LEVELS:
            raise ValueError(f"Unknown telemetry level: {self.level}")

    @property
    def user_id(self) -> str:
        return self.actor.get("id") or self.actor.get("username") or "unknown"

    @property
    def user_name(self) -> str:
        return self.actor.get("name") or "unknown"

    @property
    def is_debug(self) -> bool:
        return self.event_type == BankingEvent.DEBUG.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        result = {
            'event_type': self.event_type,
            'level': self.level,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'data': self.data,
            'correlation_id': self.correlation_id,
            'timestamp': self.timestamp.isoformat(),
        }
        if self.message is not None:
            result['message'] = self.message
        return result


class TelemetryDispatcher:
    """Fan-out of telemetry events to every configured sink"""

    def __init__(self, sinks: Optional[List['TelemetrySink']] = None):
        self.sinks: List['TelemetrySink'] = list(sinks or [])
        self.logger = logging.getLogger("banking_demo.telemetry")

    def add_sink(self, sink: 'TelemetrySink') -> None:
        self.sinks.append(sink)

    def emit(
        self,
        event_type: Union[BankingEvent, str],
        actor: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        level: str = "INFO",
    ) -> Optional[TelemetryEvent]:
        """
        Build an event and publish it. Never raises.

        A ``correlationId`` already present in ``data`` wins over the
        ``correlation_id`` argument; otherwise the argument (or a fresh id) is
        written into the payload so every sink sees the same value.
        """
        try:
            payload = dict(data or {})
            correlation_id = payload.get("correlationId") or correlation_id or new_correlation_id()
            payload["correlationId"] = correlation_id
            event = TelemetryEvent(
                event_type=event_type_name(event_type),
                actor=dict(actor or {}),
                data=payload,
                correlation_id=correlation_id,
                level=level,
            )
        except Exception as e:
            self.logger.error(f"Could not build telemetry event {event_type_name(event_type)}: {e}")
            return None
        self.publish(event)
        return event

    def debug(self, message: str, correlation_id: Optional[str] = None) -> Optional[TelemetryEvent]:
        """Publish a DEBUG level phase message"""
        event = TelemetryEvent(
            event_type=BankingEvent.DEBUG.value,
            correlation_id=correlation_id or new_correlation_id(),
            level="DEBUG",
            message=message,
        )
        self.publish(event)
        return event

    def publish(self, event: TelemetryEvent) -> None:
        """Publish event to all sinks"""
        for sink in self.sinks:
            try:
                sink.emit(event)
            except Exception as e:
                # Sink failures stay local to the sink
                self.logger.error(f"Error in telemetry sink {sink.name} for {event.event_type}: {e}")

    def close(self) -> None:
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                self.logger.warning(f"Error closing telemetry sink {sink.name}: {e}")

    def get_sink_names(self) -> List[str]:
        return [sink.name for sink in self.sinks]
