"""
Ledger Storage Module

Provides the abstract ledger store interface and implementations for
in-memory (testing) and JSON file (demo persistence) backends. The whole
ledger is read and written on every operation.

There is no locking: two requests that load, modify and save the same user's
accounts concurrently can interleave, e.g. two transfers from one account can
both pass the funds check and overdraw it. This single-process demo accepts
that race; do not use these stores as a template for production behaviour.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Union
from pathlib import Path
import json
import os
import tempfile
import logging

from .models import LedgerState
from .seed import default_ledger_state


logger = logging.getLogger("banking_demo.storage")


class LedgerStore(ABC):
    """Abstract interface for ledger backends"""

    @abstractmethod
    def load(self) -> LedgerState:
        """Return the full current ledger state"""
        pass

    @abstractmethod
    def save(self, state: LedgerState) -> None:
        """Persist the full ledger state"""
        pass

    def close(self) -> None:
        """Release backend resources (default no-op)"""
        pass


class InMemoryLedgerStore(LedgerStore):
    """In-memory ledger for testing"""

    def __init__(self, initial: Optional[LedgerState] = None):
        state = initial if initial is not None else default_ledger_state()
        self._data: Dict[str, Any] = state.to_dict()

    def load(self) -> LedgerState:
        """Load a detached copy of the ledger"""
        # Round-trip through JSON so callers never share mutable state with the store
        return LedgerState.from_dict(json.loads(json.dumps(self._data)))

    def save(self, state: LedgerState) -> None:
        """Replace the stored ledger"""
        self._data = json.loads(json.dumps(state.to_dict()))

    def get_all_data(self) -> Dict[str, Any]:
        """Get raw data for debugging/inspection"""
        return json.loads(json.dumps(self._data))


class JsonFileLedgerStore(LedgerStore):
    """JSON file ledger (``data.json``) for the demo server"""

    def __init__(self, path: Union[str, Path] = "data.json",
                 seed: Callable[[], LedgerState] = default_ledger_state):
        self.path = Path(path)
        if not self.path.exists():
            logger.info(f"Ledger file {self.path} not found, seeding demo data")
            self.save(seed())

    def load(self) -> LedgerState:
        """Read and parse the ledger file"""
        with open(self.path, "r", encoding="utf-8") as fh:
            return LedgerState.from_dict(json.load(fh))

    def save(self, state: LedgerState) -> None:
        """Write the ledger to a temp file and atomically swap it into place"""
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(state.to_dict(), fh, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


def create_ledger_store(backend: str = "json", data_file: Union[str, Path] = "data.json") -> LedgerStore:
    """Create a ledger store for a configured backend name"""
    if backend == "memory":
        return InMemoryLedgerStore()
    if backend == "json":
        return JsonFileLedgerStore(data_file)
    raise ValueError(f"Unknown storage backend: {backend}")
