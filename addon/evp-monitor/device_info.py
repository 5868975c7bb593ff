#!/usr/bin/env python3
"""
Device-reported system documents: device info, device states, capabilities
and the reserved DTMI schema.

The agent publishes these under ``state/$system/<name>`` envelope keys.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Annotated, Any, ClassVar, Literal, get_args

from pydantic import AfterValidator, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

from errors import InvalidFormat
from evp_model import EvpModel, IntCode

UNKNOWN_TEMPERATURE = -300
PLACEHOLDER = "-"

ChipName = Literal["main_chip", "companion_chip", "sensor_chip"]
CHIP_NAMES: tuple[str, ...] = get_args(ChipName)


# ============================================================================
# Enums
# ============================================================================

class PowerSourceType(IntEnum):
    UNKNOWN = -1
    POE = 0
    USB = 1
    DC_PLUG = 2
    PRIMARY_BATTERY = 3
    SECONDARY_BATTERY = 4

    @property
    def label(self) -> str:
        return _POWER_SOURCE_LABELS[self]


_POWER_SOURCE_LABELS = {
    PowerSourceType.UNKNOWN: "Unknown",
    PowerSourceType.POE: "PoE",
    PowerSourceType.USB: "USB",
    PowerSourceType.DC_PLUG: "DC Plug",
    PowerSourceType.PRIMARY_BATTERY: "Primary Battery",
    PowerSourceType.SECONDARY_BATTERY: "Secondary Battery",
}


class BootupReason(IntEnum):
    UNKNOWN = -1
    POWER_SUPPLY = 0
    HW_RESET = 1
    SW_RESET = 2
    SW_UPDATE = 3
    USER_REQUEST = 4

    @property
    def label(self) -> str:
        return _BOOTUP_REASON_LABELS[self]


_BOOTUP_REASON_LABELS = {
    BootupReason.UNKNOWN: "Unknown",
    BootupReason.POWER_SUPPLY: "Power supply",
    BootupReason.HW_RESET: "Hardware reset",
    BootupReason.SW_RESET: "Software reset",
    BootupReason.SW_UPDATE: "Software update",
    BootupReason.USER_REQUEST: "User request (cloud)",
}


class WirelessMode(IntEnum):
    UNKNOWN = -1
    NONE = 0
    STATION = 1
    ACCESS_POINT = 2
    STATION_AND_ACCESS_POINT = 3

    @property
    def label(self) -> str:
        return _WIRELESS_MODE_LABELS[self]


_WIRELESS_MODE_LABELS = {
    WirelessMode.UNKNOWN: "Unknown",
    WirelessMode.NONE: "None",
    WirelessMode.STATION: "Station",
    WirelessMode.ACCESS_POINT: "Access point",
    WirelessMode.STATION_AND_ACCESS_POINT: "Station and access point",
}


def _display(value: str | None) -> str:
    return value if value else PLACEHOLDER


# Empty strings read as the "-" placeholder
DisplayStr = Annotated[StrictStr, AfterValidator(_display)]


# ============================================================================
# Device info
# ============================================================================

class AiModel(EvpModel):
    """AI model slot reported for a chip."""
    version: DisplayStr = PLACEHOLDER
    hash: DisplayStr = PLACEHOLDER
    update_date: DisplayStr = PLACEHOLDER

    def summary(self) -> str:
        return f"version: {self.version} update_date: {self.update_date} hash:{self.hash}"


class ChipInfo(EvpModel):
    name: ChipName
    id: DisplayStr = PLACEHOLDER
    hardware_version: DisplayStr = PLACEHOLDER
    temperature: StrictInt = UNKNOWN_TEMPERATURE
    loader_version: DisplayStr = PLACEHOLDER
    loader_hash: DisplayStr = PLACEHOLDER
    update_date_loader: DisplayStr = PLACEHOLDER
    firmware_version: DisplayStr = PLACEHOLDER
    firmware_hash: DisplayStr = PLACEHOLDER
    update_date_firmware: DisplayStr = PLACEHOLDER
    ai_models: tuple[AiModel, ...] = ()

    def ai_models_pairs(self) -> list[tuple[str, str]]:
        return [
            (f"ai_models[{i}]", model.summary())
            for i, model in enumerate(self.ai_models)
        ]


class DeviceInfo(EvpModel):
    """Firmware and hardware inventory, one entry per logical chip."""
    model_config = ConfigDict(title="device_info", extra="forbid")

    device_manifest: StrictStr | None = None
    chips: dict[str, ChipInfo]

    @field_validator("chips", mode="before")
    @classmethod
    def index_chips_by_name(cls, value: Any) -> Any:
        """The wire carries a list; chips are stored by name."""
        if isinstance(value, dict) and value and all(isinstance(c, ChipInfo) for c in value.values()):
            return value
        if not isinstance(value, list):
            raise ValueError("expected array of chips")
        chips: dict[str, Any] = {}
        for index, raw in enumerate(value):
            name = raw.get("name") if isinstance(raw, dict) else None
            key = name if isinstance(name, str) else f"#{index}"
            if key in chips:
                raise ValueError(f"duplicate chip {key!r}")
            chips[key] = raw
        return chips

    @classmethod
    def default(cls) -> "DeviceInfo":
        return cls(
            device_manifest=PLACEHOLDER,
            chips={name: ChipInfo(name=name) for name in CHIP_NAMES},
        )

    def chip(self, name: str) -> ChipInfo | None:
        return self.chips.get(name)

    def main_chip(self) -> ChipInfo | None:
        return self.chips.get("main_chip")

    def companion_chip(self) -> ChipInfo | None:
        return self.chips.get("companion_chip")

    def sensor_chip(self) -> ChipInfo | None:
        return self.chips.get("sensor_chip")

    def get_map(self) -> dict[str, str]:
        """Flatten into ``chip[<name>].<field>`` labels for generic display."""
        result = {"device_manifest": _display(self.device_manifest)}
        for name, chip in self.chips.items():
            prefix = f"chip[{name}]"
            result[f"{prefix}.id"] = chip.id
            result[f"{prefix}.hardware_version"] = chip.hardware_version
            result[f"{prefix}.temperature"] = str(chip.temperature)
            result[f"{prefix}.loader_version"] = chip.loader_version
            result[f"{prefix}.loader_hash"] = chip.loader_hash
            result[f"{prefix}.update_date_loader"] = chip.update_date_loader
            result[f"{prefix}.firmware_version"] = chip.firmware_version
            result[f"{prefix}.firmware_hash"] = chip.firmware_hash
            result[f"{prefix}.update_date_firmware"] = chip.update_date_firmware
            for key, value in chip.ai_models_pairs():
                result[f"{prefix}.{key}"] = value
        return result


# ============================================================================
# Device states
# ============================================================================

class PowerSource(EvpModel):
    type: IntCode[PowerSourceType] = PowerSourceType.UNKNOWN
    level: StrictInt = 0


class PowerStates(EvpModel):
    model_config = ConfigDict(extra="forbid")

    source: tuple[PowerSource, ...] = (PowerSource(),)
    in_use: IntCode[PowerSourceType] = PowerSourceType.UNKNOWN
    is_battery_low: StrictBool = False

    def power_sources(self) -> str:
        return ", ".join(
            f"{s.type.label}({s.level}%)" for s in self.source
        ) or PLACEHOLDER


class DeviceStates(EvpModel):
    model_config = ConfigDict(title="device_states", extra="forbid")

    ANY_OF: ClassVar[tuple[str, ...]] = (
        "power_states",
        "process_state",
        "hours_meter",
        "bootup_reason",
        "last_bootup_time",
    )

    power_states: PowerStates = Field(default_factory=PowerStates)
    process_state: StrictStr = "Idle"
    hours_meter: StrictInt = -1
    bootup_reason: IntCode[BootupReason] = BootupReason.UNKNOWN
    last_bootup_time: StrictStr = ""


# ============================================================================
# Device capabilities
# ============================================================================

class DeviceCapabilities(EvpModel):
    model_config = ConfigDict(title="device_capabilities", extra="forbid")

    ANY_OF: ClassVar[tuple[str, ...]] = (
        "is_battery_supported",
        "supported_wireless_mode",
        "is_periodic_supported",
        "is_sensor_postprocess_supported",
    )

    is_battery_supported: StrictBool = False
    supported_wireless_mode: IntCode[WirelessMode] = WirelessMode.UNKNOWN
    is_periodic_supported: StrictBool = False
    is_sensor_postprocess_supported: StrictBool = False


# ============================================================================
# Reserved (DTMI schema)
# ============================================================================

@dataclass(frozen=True)
class DtmiSchema:
    dtmi_version: int
    dtmi_path: str
    device: str


class DeviceReserved(EvpModel):
    model_config = ConfigDict(title="device_reserved", extra="forbid")

    dtmi_schema: StrictStr = Field(alias="schema")

    def parse(self) -> DtmiSchema:
        """Split ``dtmi:<namespace>:<device>;<version>``.

        Raises:
            InvalidFormat: empty string, missing delimiter or non-numeric
                version.
        """
        text = self.dtmi_schema
        if not text:
            raise InvalidFormat("DTMI schema is empty")
        semicolon = text.rfind(";")
        last_colon = text.rfind(":")
        first_colon = text.find(":")
        if semicolon < 0 or first_colon < 0:
            raise InvalidFormat(f"DTMI schema {text!r}: missing delimiter")
        if last_colon > semicolon:
            raise InvalidFormat(f"DTMI schema {text!r}: version must follow device")
        version = text[semicolon + 1:]
        if not (version.isascii() and version.isdigit()):
            raise InvalidFormat(f"DTMI schema {text!r}: invalid version {version!r}")
        return DtmiSchema(
            dtmi_version=int(version),
            dtmi_path=text[first_colon + 1:semicolon],
            device=text[last_colon + 1:semicolon],
        )
