"""Abstract base client for sls_toolkit."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List
import logging

from .models import HealthResult, RawRecord


class LogStoreClientBase(ABC):
    """Abstract base class for log store clients."""

    def __init__(self, config: Dict[str, Any]) -> None:
        self.config = config
        self.connected = False
        self._client = None
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    # -------------------- Connection management --------------------

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the log store."""

    @abstractmethod
    def close(self) -> None:
        """Close underlying client connections."""

    @abstractmethod
    def ping(self) -> bool:
        """Check if the configured log store is reachable."""

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # -------------------- Query methods --------------------

    @abstractmethod
    def get_logs(self, query: str, from_time: int, to_time: int, lines: int) -> List[RawRecord]:
        """Run a search over ``[from_time, to_time)`` epoch seconds."""

    def check_health(self) -> HealthResult:
        if self.ping():
            return HealthResult(ok=True, message="Data source is working")
        return HealthResult(ok=False, message="GetLogStore error")

    def __repr__(self) -> str:
        status = "connected" if self.connected else "disconnected"
        target = "/".join(str(self.config.get(k) or "?") for k in ("project", "logstore"))
        return f"{type(self).__name__}({target}, {status})"
