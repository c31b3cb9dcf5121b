"""sls_toolkit package."""

from .client import SlsLogClient, get_client
from .config import SlsConfig, from_env, load_env, resolve_config, settings_from_instance
from .datasource import SlsDatasource
from .exceptions import (
    InvalidPayloadError,
    RemoteFetchError,
    SlsConnectionError,
    SlsError,
)
from .frames import assemble_frame
from .models import (
    DataQuery,
    FieldKind,
    FrameShape,
    HealthResult,
    OutputFrame,
    QueryFormat,
    QueryPayload,
    QueryResponse,
    TypedRecord,
)
from .payload import parse_payload, translate_time_format

__all__ = [
    "SlsLogClient",
    "get_client",
    "SlsConfig",
    "from_env",
    "load_env",
    "resolve_config",
    "settings_from_instance",
    "SlsDatasource",
    "InvalidPayloadError",
    "RemoteFetchError",
    "SlsConnectionError",
    "SlsError",
    "assemble_frame",
    "DataQuery",
    "FieldKind",
    "FrameShape",
    "HealthResult",
    "OutputFrame",
    "QueryFormat",
    "QueryPayload",
    "QueryResponse",
    "TypedRecord",
    "parse_payload",
    "translate_time_format",
]
