#!/usr/bin/env python3
"""
Configurable system documents echoed back by the device: system, network
and wireless settings.

Each carries a ``req_info``/``res_info`` pair correlating the state with the
configuration request that produced it.
"""

from enum import IntEnum
from typing import ClassVar

from pydantic import ConfigDict, Field, StrictBool, StrictInt, StrictStr

from evp_model import EvpModel, IntCode

RES_CODE_NAMES = {
    0: "OK",
    1: "CANCELLED",
    2: "UNKNOWN",
    3: "INVALID_ARGUMENT",
    4: "DEADLINE_EXCEEDED",
    5: "NOT_FOUND",
    6: "ALREADY_EXISTS",
    7: "PERMITTED_DENIED",
    8: "RESOURCE_EXHAUSTED",
    9: "FAILED_PRECONDITION",
    10: "ABORTED",
    11: "OUT_OF_RANGE",
    12: "UNIMPLEMENTED",
    13: "INTERNAL",
    14: "UNAVAILABLE",
    15: "DATA_LOSS",
    16: "UNAUTHENTICATED",
}


class ReqInfo(EvpModel):
    req_id: StrictStr = ""


class ResInfo(EvpModel):
    res_id: StrictStr = ""
    code: StrictInt | None = None
    detail_msg: StrictStr = ""

    def code_str(self) -> str:
        if self.code not in RES_CODE_NAMES:
            return ""
        return f"{RES_CODE_NAMES[self.code]}({self.code})"


# ============================================================================
# System settings
# ============================================================================

class LogDestination(IntEnum):
    UART = 0
    CLOUD_STORAGE = 1


class LogSetting(EvpModel):
    filter: StrictStr = ""
    level: StrictInt = 0
    destination: IntCode[LogDestination] = LogDestination.UART
    storage_name: StrictStr = ""
    path: StrictStr = ""

    def destination_str(self) -> str:
        return self.destination.name.lower()


class SystemSettings(EvpModel):
    model_config = ConfigDict(title="system_settings", extra="forbid")

    ANY_OF: ClassVar[tuple[str, ...]] = (
        "led_enabled",
        "temperature_update_interval",
        "log_settings",
    )

    req_info: ReqInfo | None = None
    led_enabled: StrictBool | None = None
    temperature_update_interval: StrictInt | None = None
    log_settings: tuple[LogSetting, ...] = ()
    res_info: ResInfo | None = None


# ============================================================================
# Network settings
# ============================================================================

class IpMethod(IntEnum):
    DHCP = 0
    STATIC = 1


class StaticIpSettings(EvpModel):
    ip_address: StrictStr = ""
    subnet_mask: StrictStr = ""
    gateway_address: StrictStr = ""
    dns_address: StrictStr = ""


class ProxySettings(EvpModel):
    proxy_url: StrictStr = ""
    proxy_port: StrictInt = 0
    proxy_user_name: StrictStr = ""
    proxy_password: StrictStr = Field(default="", repr=False)


class NetworkSettings(EvpModel):
    model_config = ConfigDict(title="network_settings", extra="forbid")

    ANY_OF: ClassVar[tuple[str, ...]] = (
        "ip_method",
        "ntp_url",
        "static_settings_ipv4",
        "static_settings_ipv6",
        "proxy_settings",
    )

    req_info: ReqInfo | None = None
    ip_method: IntCode[IpMethod] | None = None
    ntp_url: StrictStr | None = None
    static_settings_ipv4: StaticIpSettings | None = None
    static_settings_ipv6: StaticIpSettings | None = None
    proxy_settings: ProxySettings | None = None
    res_info: ResInfo | None = None


# ============================================================================
# Wireless settings
# ============================================================================

class WifiEncryption(IntEnum):
    WPA2_PSK = 0
    WPA3_PSK = 1
    WPA2_WPA3_PSK = 2


class StationModeSetting(EvpModel):
    ssid: StrictStr = ""
    password: StrictStr = Field(default="", repr=False)
    encryption: IntCode[WifiEncryption] = WifiEncryption.WPA2_PSK


class WirelessSettings(EvpModel):
    model_config = ConfigDict(title="wireless_setting", extra="forbid")

    req_info: ReqInfo | None = None
    sta_mode_setting: StationModeSetting
    res_info: ResInfo | None = None
