"""
Banking system container and request dependencies
"""

from typing import Optional

from fastapi import Depends, Header, Request

from ..banking import BankingService, RequestContext
from ..config import BankingDemoConfig, get_config
from ..events import TelemetryDispatcher, new_correlation_id
from ..hec_client import HecClient
from ..sessions import SESSION_HEADER, SessionGuard
from ..sinks import create_dispatcher
from ..storage import LedgerStore, create_ledger_store


class BankingSystem:
    """Banking demo with all components wired explicitly"""

    def __init__(
        self,
        config: Optional[BankingDemoConfig] = None,
        store: Optional[LedgerStore] = None,
        telemetry: Optional[TelemetryDispatcher] = None,
        hec_client: Optional[HecClient] = None,
    ):
        self.config = config or get_config()
        self.store = store or create_ledger_store(self.config.storage_backend, self.config.data_file)
        self.telemetry = telemetry or create_dispatcher(self.config, hec_client=hec_client)
        self.sessions = SessionGuard(self.store)
        self.banking = BankingService(self.store, self.sessions, self.telemetry)

    def close(self) -> None:
        self.telemetry.close()
        self.store.close()


def get_banking_system(request: Request) -> BankingSystem:
    return request.app.state.banking_system


def get_correlation_id(request: Request) -> str:
    correlation_id = getattr(request.state, "correlation_id", None)
    if not correlation_id:
        correlation_id = new_correlation_id()
        request.state.correlation_id = correlation_id
    return correlation_id


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def get_anonymous_context(request: Request) -> RequestContext:
    """Context for routes that bypass the session guard"""
    return RequestContext(correlation_id=get_correlation_id(request), client_ip=_client_ip(request))


def get_request_context(
    request: Request,
    system: BankingSystem = Depends(get_banking_system),
    session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
) -> RequestContext:
    """Session guard: resolves ``X-Session-Id`` or raises NotAuthenticatedError (401)"""
    session_id, user = system.sessions.resolve(session_id)
    return RequestContext(
        correlation_id=get_correlation_id(request),
        session_id=session_id,
        user=user,
        client_ip=_client_ip(request),
    )
