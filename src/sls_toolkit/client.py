"""Simple Log Service client and factory."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union
import logging

from .base import LogStoreClientBase
from .config import SlsConfig, resolve_config
from .exceptions import RemoteFetchError, SlsConnectionError
from .models import RawRecord

logger = logging.getLogger(__name__)


class SlsLogClient(LogStoreClientBase):
    """Read-only client for one SLS project/logstore pair."""

    def __init__(
        self,
        endpoint: str,
        project: str,
        logstore: str,
        access_key_id: str = "",
        access_key_secret: str = "",
        client: Optional[object] = None,
    ) -> None:
        config = {
            "endpoint": endpoint,
            "project": project,
            "logstore": logstore,
            "access_key_id": access_key_id,
        }
        super().__init__(config=config)
        if client is None:
            from aliyun.log import LogClient

            self._client = LogClient(endpoint, access_key_id, access_key_secret)
        else:
            self._client = client
        self._project = project
        self._logstore = logstore

    def connect(self) -> None:
        try:
            self._client.get_logstore(self._project, self._logstore)
            self.connected = True
        except Exception as exc:
            self.connected = False
            raise SlsConnectionError(str(exc)) from exc

    def close(self) -> None:
        self.connected = False

    def ping(self) -> bool:
        try:
            self._client.get_logstore(self._project, self._logstore)
            return True
        except Exception as exc:
            self.logger.warning("get_logstore failed for %s/%s: %s", self._project, self._logstore, exc)
            return False

    def get_logs(self, query: str, from_time: int, to_time: int, lines: int) -> List[RawRecord]:
        logger.debug(
            "get_log project=%s logstore=%s from=%d to=%d size=%d query=%r",
            self._project,
            self._logstore,
            from_time,
            to_time,
            lines,
            query,
        )
        try:
            response = self._client.get_log(
                self._project,
                self._logstore,
                from_time,
                to_time,
                query=query,
                size=lines,
                offset=0,
                reverse=False,
            )
        except Exception as exc:
            logger.error("get_log failed for query %r: %s", query, exc)
            raise RemoteFetchError(str(exc)) from exc
        records = [_contents_to_record(log.get_contents()) for log in response.get_logs()]
        logger.info("get_log returned %d records", len(records))
        return records


def _contents_to_record(contents: Mapping[str, Any]) -> Dict[str, str]:
    return {str(k): "" if v is None else str(v) for k, v in contents.items()}


def get_client(config: Union[SlsConfig, Mapping[str, Any], None]) -> SlsLogClient:
    """Build a client from a config dataclass or mapping.

    A mapping may carry a ``client`` entry to stand in for the SDK client.
    """
    if config is None:
        raise ValueError("config is required")
    client_override = config.get("client") if isinstance(config, Mapping) else None
    cfg = resolve_config(config)
    missing = [name for name in ("endpoint", "project", "logstore") if not getattr(cfg, name)]
    if missing:
        raise ValueError(f"missing SLS settings: {', '.join(missing)}")
    return SlsLogClient(
        endpoint=cfg.endpoint,
        project=cfg.project,
        logstore=cfg.logstore,
        access_key_id=cfg.access_key_id,
        access_key_secret=cfg.access_key_secret,
        client=client_override,
    )
