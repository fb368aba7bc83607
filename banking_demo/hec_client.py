"""
HTTP Event Collector Client Module

Best-effort forwarder of telemetry events to an HTTP Event Collector (HEC)
endpoint. One POST per event, no batching and no retries. Every event is
also written to a local log line; network delivery happens only when both
endpoint and token are configured. Nothing here ever raises to the caller.
"""

import json
import logging
import socket
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import httpx

from .events import new_correlation_id

logger = logging.getLogger("banking_demo.hec")

Envelope = Dict[str, Any]


class DeliveryStrategy(ABC):
    """How an envelope reaches :meth:`HecClient.send`"""

    @abstractmethod
    def deliver(self, send: Callable[[Envelope], bool], envelope: Envelope) -> None:
        pass

    def close(self) -> None:
        pass


class InlineDelivery(DeliveryStrategy):
    """Send on the caller's thread; used by tests and one-shot scripts"""

    def deliver(self, send: Callable[[Envelope], bool], envelope: Envelope) -> None:
        send(envelope)


class BackgroundDelivery(DeliveryStrategy):
    """Hand the POST to a small worker pool so requests never wait on the collector"""

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hec-delivery")

    def deliver(self, send: Callable[[Envelope], bool], envelope: Envelope) -> None:
        try:
            self._executor.submit(send, envelope)
        except RuntimeError as e:  # executor already shut down
            logger.error(f"HEC delivery skipped: {e}")

    def close(self) -> None:
        self._executor.shutdown(wait=True)


class HecClient:
    """REST client for an HTTP Event Collector"""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        token: Optional[str] = None,
        source: str = "banking-demo",
        sourcetype: str = "nodejs",
        index: str = "default",
        auth_scheme: str = "Splunk",
        verify_tls: bool = True,
        timeout: float = 5.0,
        app: str = "banking-demo",
        environment: str = "demo",
        delivery: Optional[DeliveryStrategy] = None,
        client: Optional[httpx.Client] = None,
        host: Optional[str] = None,
    ):
        self.endpoint = endpoint or None
        self.token = token or None
        self.source = source
        self.sourcetype = sourcetype
        self.index = index
        self.auth_scheme = auth_scheme
        self.verify_tls = verify_tls
        self.timeout = timeout
        self.app = app
        self.environment = environment
        self.host = host or socket.gethostname()
        self.delivery = delivery or InlineDelivery()
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, verify=verify_tls)

        if not self.endpoint or not self.token:
            logger.warning("Missing HEC endpoint or token, logging to console only")
        elif self.scheme not in ("http", "https"):
            logger.error(f"Unsupported HEC endpoint scheme '{self.scheme}', logging to console only")
            self.endpoint = None
        elif self.scheme == "https" and not verify_tls:
            logger.warning("HEC TLS certificate verification is DISABLED")

    @classmethod
    def from_config(cls, config, delivery: Optional[DeliveryStrategy] = None,
                    client: Optional[httpx.Client] = None) -> 'HecClient':
        """Create a client from :class:`banking_demo.config.BankingDemoConfig`"""
        if delivery is None:
            delivery = BackgroundDelivery() if config.hec_async_delivery else InlineDelivery()
        return cls(
            endpoint=config.hec_endpoint,
            token=config.hec_token,
            source=config.hec_source,
            sourcetype=config.hec_sourcetype,
            index=config.hec_index,
            auth_scheme=config.hec_auth_scheme,
            verify_tls=config.hec_verify_tls,
            timeout=config.hec_timeout,
            app=config.app_name,
            environment=config.environment,
            delivery=delivery,
            client=client,
        )

    @property
    def scheme(self) -> Optional[str]:
        """Transport scheme taken from the endpoint URL (http or https)"""
        if not self.endpoint:
            return None
        return urlparse(self.endpoint).scheme.lower()

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint) and bool(self.token)

    def build_envelope(self, event_type: str, user: Optional[Dict[str, Any]] = None,
                       data: Optional[Dict[str, Any]] = None) -> Envelope:
        """Wrap an event in the collector's JSON envelope"""
        user = user or {}
        data = data or {}
        return {
            "time": time.time(),
            "host": self.host,
            "source": self.source,
            "sourcetype": self.sourcetype,
            "event": {
                "event_type": event_type,
                "user_id": user.get("id") or user.get("username") or "unknown",
                "user_name": user.get("name") or "unknown",
                "data": data,
                "app": self.app,
                "environment": self.environment,
                "correlation_id": data.get("correlationId") or new_correlation_id(),
            },
        }

    def build_debug_envelope(self, message: str) -> Envelope:
        return {
            "time": time.time(),
            "host": self.host,
            "source": self.source,
            "sourcetype": self.sourcetype,
            "event": {
                "level": "DEBUG",
                "message": message,
                "app": self.app,
                "environment": self.environment,
            },
        }

    def log(self, event_type: str, user: Optional[Dict[str, Any]] = None,
            data: Optional[Dict[str, Any]] = None) -> Optional[Envelope]:
        """
        Log an event locally and forward it to the collector when configured.

        Returns:
            The envelope that was (or would have been) delivered, or None if it
            could not be built
        """
        try:
            envelope = self.build_envelope(event_type, user, data)
            logger.info(
                f"EVENT={event_type} USER={json.dumps(user or {}, default=str)} "
                f"DATA={json.dumps(data or {}, default=str)}"
            )
        except Exception as e:
            logger.error(f"Could not format HEC event {event_type}: {e}")
            return None

        self._dispatch(envelope)
        return envelope

    def debug(self, message: str) -> Optional[Envelope]:
        """Log a debug message locally and forward it when configured"""
        envelope = self.build_debug_envelope(message)
        logger.debug(f"DEBUG {message}")
        self._dispatch(envelope)
        return envelope

    def _dispatch(self, envelope: Envelope) -> None:
        if not self.is_configured:
            return
        try:
            self.delivery.deliver(self.send, envelope)
        except Exception as e:
            logger.error(f"HEC delivery failed: {e}")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"{self.auth_scheme} {self.token}",
            "Content-Type": "application/json",
        }

    def send(self, envelope: Envelope) -> bool:
        """POST one envelope. Failures are logged, never retried, never raised."""
        if not self.is_configured:
            return False
        try:
            response = self._client.post(
                self.endpoint,
                content=json.dumps(envelope, default=str),
                headers=self._headers(),
            )
        except Exception as e:
            logger.error(f"HEC request error: {e}")
            return False

        if 200 <= response.status_code < 300:
            logger.debug(f"HEC request successful ({response.status_code})")
            return True

        logger.error(f"HEC request failed with status {response.status_code}")
        logger.error(f"Response body: {response.text}")
        return False

    def health_check(self) -> bool:
        """Send a connection-test event synchronously and report success"""
        if not self.is_configured:
            logger.warning("HEC health check skipped: endpoint or token missing")
            return False
        envelope = {
            "time": time.time(),
            "host": self.host,
            "source": f"{self.app}-test",
            "sourcetype": "_json",
            "event": {
                "message": "Banking Demo Connection Test",
                "test_type": "connection_verification",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "app": self.app,
            },
        }
        return self.send(envelope)

    def masked_token(self) -> str:
        if not self.token:
            return ""
        return f"{self.token[:8]}..."

    def close(self):
        """Stop delivery workers and close the HTTP client"""
        self.delivery.close()
        if self._owns_client:
            self._client.close()
