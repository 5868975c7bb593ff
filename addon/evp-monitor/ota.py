#!/usr/bin/env python3
"""
OTA firmware property: the per-chip loader/firmware target list exchanged
with the device during a firmware update.
"""

from enum import Enum, IntEnum
from typing import Any

from pydantic import ConfigDict, Field, StrictInt, StrictStr

from evp_model import EvpModel
from system_settings import ReqInfo


class ChipId(IntEnum):
    MAIN_CHIP = 0
    COMPANION_CHIP = 1
    SENSOR_CHIP = 2

    @property
    def chip_name(self) -> str:
        return _CHIP_NAMES[self]


_CHIP_NAMES = {
    ChipId.MAIN_CHIP: "ApFw",
    ChipId.COMPANION_CHIP: "AI-ISP",
    ChipId.SENSOR_CHIP: "IMX500",
}


class Component(Enum):
    LOADER = "loader"
    FIRMWARE = "firmware"

    @property
    def index(self) -> int:
        return 0 if self is Component.LOADER else 1


class ProcessState(Enum):
    IDLE = "idle"
    REQUEST_RECEIVED = "request_received"
    DOWNLOADING = "downloading"
    INSTALLING = "installing"
    DONE = "done"
    FAILED = "failed"
    FAILED_INVALID_ARGUMENT = "failed_invalid_argument"
    FAILED_TOKEN_EXPIRED = "failed_token_expired"
    FAILED_DOWNLOAD_RETRY_EXCEEDED = "failed_download_retry_exceeded"


class ResponseCode(Enum):
    OK = "ok"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"
    INVALID_ARGUMENT = "invalid_argument"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    ABORTED = "aborted"
    OUT_OF_RANGE = "out_of_range"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"
    DATA_LOSS = "data_loss"
    UNAUTHENTICATED = "unauthenticated"


class Target(EvpModel):
    model_config = ConfigDict(frozen=False)

    component: Component
    chip: StrictStr
    version: StrictStr | None = None
    progress: StrictInt | None = None
    process_state: ProcessState | None = None
    package_url: StrictStr | None = None
    hash: StrictStr | None = None
    size: StrictInt | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class OtaResInfo(EvpModel):
    model_config = ConfigDict(frozen=False)

    res_id: StrictStr | None = None
    code: ResponseCode | None = None
    detail_msg: StrictStr | None = None


def _default_targets() -> list[Target]:
    return [
        Target(component=component, chip=chip.chip_name)
        for chip in ChipId
        for component in Component
    ]


class FirmwareProperty(EvpModel):
    """Firmware update request/state.

    The default instance holds one loader and one firmware target per chip,
    ordered so ``chip * 2 + component`` indexes ``targets``.
    """
    model_config = ConfigDict(title="firmware_property", frozen=False)

    req_info: ReqInfo | None = None
    version: StrictStr | None = None
    targets: list[Target] = Field(default_factory=_default_targets)
    res_info: OtaResInfo | None = None

    @property
    def req_id(self) -> str | None:
        return self.req_info.req_id if self.req_info is not None else None

    def get_target(self, chip: ChipId, component: Component) -> Target | None:
        index = int(chip) * 2 + component.index
        if index < len(self.targets):
            return self.targets[index]
        return None

    def targets_by_chip(self, chip_name: str) -> list[Target]:
        return [t for t in self.targets if t.chip == chip_name]

    def all_chips(self) -> list[str]:
        return sorted({t.chip for t in self.targets})

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    @classmethod
    def decode(cls, obj: Any) -> "FirmwareProperty":
        # a received property without targets has none, not the defaults
        if isinstance(obj, dict) and obj.get("targets") is None:
            obj = {**obj, "targets": []}
        return super().decode(obj)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
