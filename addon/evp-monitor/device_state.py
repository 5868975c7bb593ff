#!/usr/bin/env python3
"""
DeviceState - latest known state of the single monitored device.

Written only by ``MqttCtrl``; read by any consumer through the getters or
``snapshot()``. Every document field is replaced wholesale.
"""

import datetime
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from config import ELOG_HISTORY_SIZE
from device_info import DeviceCapabilities, DeviceInfo, DeviceReserved, DeviceStates
from edge_app import EdgeAppInfo
from elog import Elog
from evp_state import AgentDeviceConfig, AgentSystemInfo, DeploymentStatus
from evp_uuid import UUID
from models import DocumentKind
from system_settings import NetworkSettings, SystemSettings, WirelessSettings

logger = logging.getLogger(__name__)

# DocumentKind -> attribute replaced on apply
_FIELD_BY_KIND = {
    DocumentKind.DEVICE_INFO: "device_info",
    DocumentKind.DEVICE_STATES: "device_states",
    DocumentKind.DEVICE_CAPABILITIES: "device_capabilities",
    DocumentKind.DEVICE_RESERVED: "device_reserved",
    DocumentKind.AGENT_SYSTEM_INFO: "agent_system_info",
    DocumentKind.AGENT_DEVICE_CONFIG: "agent_device_config",
    DocumentKind.SYSTEM_SETTINGS: "system_settings",
    DocumentKind.NETWORK_SETTINGS: "network_settings",
    DocumentKind.WIRELESS_SETTINGS: "wireless_settings",
    DocumentKind.DEPLOYMENT_STATUS: "deployment_status",
}


@dataclass(frozen=True)
class DeviceSnapshot:
    """Consistent copy of the aggregate taken under the lock."""
    device_info: DeviceInfo
    device_states: DeviceStates
    device_capabilities: DeviceCapabilities
    device_reserved: DeviceReserved | None
    agent_system_info: AgentSystemInfo
    agent_device_config: AgentDeviceConfig
    system_settings: SystemSettings | None
    network_settings: NetworkSettings | None
    wireless_settings: WirelessSettings | None
    deployment_status: DeploymentStatus | None
    edge_apps: dict[UUID, EdgeAppInfo] = field(default_factory=dict)
    elogs: tuple[Elog, ...] = ()
    connected: bool = False
    last_seen: float | None = None


class DeviceState:
    """Aggregate of every document received from the device."""

    def __init__(self, elog_history: int = ELOG_HISTORY_SIZE):
        self._lock = threading.RLock()
        self._device_info = DeviceInfo.default()
        self._device_states = DeviceStates.default()
        self._device_capabilities = DeviceCapabilities.default()
        self._device_reserved: DeviceReserved | None = None
        self._agent_system_info = AgentSystemInfo.default()
        self._agent_device_config = AgentDeviceConfig.default()
        self._system_settings: SystemSettings | None = None
        self._network_settings: NetworkSettings | None = None
        self._wireless_settings: WirelessSettings | None = None
        self._deployment_status: DeploymentStatus | None = None
        self._edge_apps: dict[UUID, EdgeAppInfo] = {}
        self._elogs: deque[Elog] = deque(maxlen=elog_history)
        self._connected = False
        self._last_seen: float | None = None

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get_device_info(self) -> DeviceInfo:
        with self._lock:
            return self._device_info

    def get_device_states(self) -> DeviceStates:
        with self._lock:
            return self._device_states

    def get_device_capabilities(self) -> DeviceCapabilities:
        with self._lock:
            return self._device_capabilities

    def get_device_reserved(self) -> DeviceReserved | None:
        with self._lock:
            return self._device_reserved

    def get_agent_system_info(self) -> AgentSystemInfo:
        with self._lock:
            return self._agent_system_info

    def get_agent_device_config(self) -> AgentDeviceConfig:
        with self._lock:
            return self._agent_device_config

    def get_system_settings(self) -> SystemSettings | None:
        with self._lock:
            return self._system_settings

    def get_network_settings(self) -> NetworkSettings | None:
        with self._lock:
            return self._network_settings

    def get_wireless_settings(self) -> WirelessSettings | None:
        with self._lock:
            return self._wireless_settings

    def get_deployment_status(self) -> DeploymentStatus | None:
        with self._lock:
            return self._deployment_status

    def get_edge_app(self, instance_id: UUID) -> EdgeAppInfo | None:
        with self._lock:
            return self._edge_apps.get(instance_id)

    def get_edge_apps(self) -> dict[UUID, EdgeAppInfo]:
        with self._lock:
            return dict(self._edge_apps)

    def get_elogs(self) -> list[Elog]:
        with self._lock:
            return list(self._elogs)

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._connected

    @property
    def last_seen(self) -> float | None:
        """Wall-clock epoch of the last device activity."""
        with self._lock:
            return self._last_seen

    def last_seen_iso(self) -> str | None:
        seen = self.last_seen
        if seen is None:
            return None
        return datetime.datetime.fromtimestamp(seen, datetime.UTC).isoformat()

    def is_instance_deployed(self, instance_id: UUID) -> bool:
        with self._lock:
            status = self._deployment_status
            return status is not None and status.has_instance(instance_id)

    def snapshot(self) -> DeviceSnapshot:
        with self._lock:
            return DeviceSnapshot(
                device_info=self._device_info,
                device_states=self._device_states,
                device_capabilities=self._device_capabilities,
                device_reserved=self._device_reserved,
                agent_system_info=self._agent_system_info,
                agent_device_config=self._agent_device_config,
                system_settings=self._system_settings,
                network_settings=self._network_settings,
                wireless_settings=self._wireless_settings,
                deployment_status=self._deployment_status,
                edge_apps=dict(self._edge_apps),
                elogs=tuple(self._elogs),
                connected=self._connected,
                last_seen=self._last_seen,
            )

    def get_status(self) -> dict[str, Any]:
        """Short summary for status logging."""
        with self._lock:
            info = self._agent_system_info
            deployment = self._deployment_status
            return {
                "connected": self._connected,
                "last_seen": self.last_seen_iso(),
                "evp_agent": info.evp_agent or None,
                "protocol_version": info.protocol_version or None,
                "instances": len(deployment.instances) if deployment else 0,
                "modules": len(deployment.modules) if deployment else 0,
                "edge_apps": len(self._edge_apps),
                "elogs": len(self._elogs),
            }

    # ------------------------------------------------------------------
    # Write API (MqttCtrl only)
    # ------------------------------------------------------------------

    def apply_document(self, kind: DocumentKind, document: Any) -> None:
        with self._lock:
            if kind in _FIELD_BY_KIND:
                setattr(self, f"_{_FIELD_BY_KIND[kind]}", document)
            elif kind in (DocumentKind.EDGE_APP, DocumentKind.EDGE_APP_PASSTHROUGH):
                self._edge_apps[document.instance_id] = document
            elif kind == DocumentKind.EVENT_LOG:
                self._elogs.append(document)
            else:
                raise ValueError(f"Unsupported document kind: {kind}")
        logger.debug(f"DeviceState: {kind.value} updated")

    def mark_activity(self, wall_time: float) -> bool:
        """Record device activity. Returns True on a connected transition."""
        with self._lock:
            was_connected = self._connected
            self._connected = True
            self._last_seen = wall_time
            return not was_connected

    def mark_disconnected(self) -> bool:
        """Returns True on a disconnected transition."""
        with self._lock:
            was_connected = self._connected
            self._connected = False
            return was_connected
