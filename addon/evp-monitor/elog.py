#!/usr/bin/env python3
"""
Device event log entries published as ``$system/event_log`` telemetry.
"""

from pydantic import ConfigDict, StrictStr

from evp_model import EvpModel, NonNegativeInt

TELEMETRY_KEY = "$system/event_log"

LEVEL_NAMES = ("CRITICAL", "ERROR", "WARN", "INFO", "DEBUG", "TRACE")

EVENT_NAMES = {
    0x1010: "metadata stopped (Sensor module)",
    0x1020: "metadata started (Edge soft)",
    0x1030: "Failed to receive data",
    0x1040: "Token expired",
    0x2010: "Failed to connect to console",
    0x2020: "NTP failed",
    0x3010: "Reset by watchdog",
    0x3020: "Reboot by console request",
    0x4010: "High temperature",
    0x4020: "High temperature",
    0x4030: "Storage high temperature",
    0x4040: "Storage high temperature",
    0x4050: "Storage low temperature",
    0x4060: "Returned to normal temperature",
    0x4110: "Low temperature",
    0x4120: "Low temperature",
    0x5010: "Input sensor stopped",
    0x5020: "Edge software stopped",
    0x6001: "Reset",
    0xB000: "OTA started",
    0xB001: "Reboot started",
    0xB002: "Factory reset from console",
    0xB003: "Factory reset from push-key",
    0xB004: "DirectGetImage requested",
    0xB0B0: "Failed to get sensor temperature",
    0xB0B1: "DirectGetImage failed (sensor error)",
    0xB0B2: "Download failed",
    0xB0B3: "OTA failed (FwManager error)",
    0xD001: "File open failed (sensor)",
    0xD002: "Failed to communicate with AI device",
    0xD003: "Failed to stop with AI device",
}

# event_id with the low byte cleared -> category
EVENT_CATEGORIES = {
    0x8000: "ESF button manager event",
    0x8100: "ESF clock manager event",
    0x8200: "ESF codec base64 event",
    0x8300: "ESF codec jpeg event",
    0x8400: "ESF codec json event",
    0x8500: "ESF firmware manager event",
    0x8600: "ESF led manager event",
    0x8700: "ESF log manager event",
    0x8800: "ESF main event",
    0x8900: "ESF memory manager event",
    0x8A00: "ESF network manager event",
    0x8B00: "ESF parameter storage manager event",
    0x8C00: "ESF power manager event",
    0x8D00: "ESF system manager event",
    0x8E00: "ESF security manager event",
    0x9000: "ESF button manager porting layer event",
    0x9100: "ESF cipher util porting layer event",
    0x9200: "ESF firmware manager porting layer event",
    0x9300: "ESF flash manager porting layer event",
    0x9400: "ESF led manager porting layer event",
    0x9500: "ESF memory manager porting layer event",
    0x9600: "ESF network manager porting layer event",
    0x9700: "ESF parameter storage manager porting layer event",
    0x9800: "ESF power manager porting layer event",
    0x9900: "ESF security util porting layer event",
    0x9A00: "ESF hal driver event",
    0x9B00: "ESF hal i2c event",
    0x9C00: "ESF hal ioexp event",
    0xA000: "ESF utility log event",
    0xA100: "ESF utility message event",
    0xA200: "ESF utility timer event",
    0xA300: "ESF utility system error event",
    0xB000: "SystemApp event",
    0xD000: "Sensor event",
    0xF000: "EVP event",
}


class Elog(EvpModel):
    """One event log entry; unknown keys are ignored."""
    model_config = ConfigDict(title="event_log")

    serial: StrictStr
    level: NonNegativeInt
    timestamp: StrictStr
    component_id: NonNegativeInt
    event_id: NonNegativeInt
    component_name: StrictStr | None = None
    event_description: StrictStr | None = None

    def level_str(self) -> str:
        if self.level < len(LEVEL_NAMES):
            return LEVEL_NAMES[self.level]
        return "UNKNOWN"

    def event_str(self) -> str:
        if self.event_id in EVENT_NAMES:
            return EVENT_NAMES[self.event_id]
        return EVENT_CATEGORIES.get((self.event_id >> 8) << 8, "Unknown event")

