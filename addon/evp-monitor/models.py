#!/usr/bin/env python3
"""
Data models for classified EVP messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


# ============================================================================
# Document kinds
# ============================================================================

class DocumentKind(Enum):
    """Typed state documents a classified message can carry."""
    DEVICE_INFO = "device_info"
    DEVICE_STATES = "device_states"
    DEVICE_CAPABILITIES = "device_capabilities"
    DEVICE_RESERVED = "device_reserved"
    AGENT_SYSTEM_INFO = "agent_system_info"
    AGENT_DEVICE_CONFIG = "agent_device_config"
    SYSTEM_SETTINGS = "system_settings"
    NETWORK_SETTINGS = "network_settings"
    WIRELESS_SETTINGS = "wireless_settings"
    DEPLOYMENT_STATUS = "deployment_status"
    EDGE_APP = "edge_app"
    EDGE_APP_PASSTHROUGH = "edge_app_passthrough"
    EVENT_LOG = "event_log"


# ============================================================================
# Message variants
# ============================================================================

@dataclass(frozen=True)
class ConnectRequest:
    """Device attribute request; must be echoed back."""
    who: str
    req_id: int


@dataclass(frozen=True)
class ConnectResponse:
    who: str
    req_id: int


@dataclass(frozen=True)
class DocumentMessage:
    """One decoded state document from an attribute or telemetry envelope."""
    kind: DocumentKind
    document: Any
    key: str | None = None  # envelope key the document came from


@dataclass(frozen=True)
class RawMessage:
    topic: str
    payload: str

    def as_map(self) -> dict[str, str]:
        return {self.topic: self.payload}


class ClientOpaque(RawMessage):
    """Device state publish that matched no known document."""


class ServerOpaque(RawMessage):
    """Server-side attribute publish."""


class RpcServer(RawMessage):
    """Server to device RPC request."""


class RpcClient(RawMessage):
    """Device RPC response."""


class NonProtocol(RawMessage):
    """Anything outside the EVP topic space."""


EvpMessage = Union[
    ConnectRequest,
    ConnectResponse,
    DocumentMessage,
    ClientOpaque,
    ServerOpaque,
    RpcServer,
    RpcClient,
    NonProtocol,
]
