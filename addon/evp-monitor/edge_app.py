#!/usr/bin/env python3
"""
Edge application settings reported under ``state/<instance-uuid>/edge_app``.

``EdgeApp`` is the strict form (closed top level, ``common_settings``
required). ``EdgeAppPassthrough`` accepts any subset of the known sections
and is only kept for instances present in the current deployment status.
"""

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from errors import DecodeError, InvalidFormat
from evp_model import EvpModel
from evp_uuid import UUID
from system_settings import ReqInfo, ResInfo

EDGE_APP_KEY_RE = re.compile(r"^state/([^/]+)/edge_app\Z")

PROCESS_STATE_NAMES = {1: "stopped", 2: "running"}
LOG_LEVEL_NAMES = {0: "critical", 1: "error", 2: "warn", 3: "info", 4: "debug", 5: "trace"}
EXPOSURE_MODE_NAMES = {0: "auto", 3: "manual"}
WHITE_BALANCE_MODE_NAMES = {0: "auto", 1: "manual_preset"}
SCALING_POLICY_NAMES = {1: "sensitivity", 2: "resolution"}
CODEC_FORMAT_NAMES = {0: "raw_data", 1: "JPEG", 2: "BMP"}
PORT_METHOD_NAMES = {0: "evp_telemetry", 1: "blob_storage", 2: "http_storage"}


def _name(table: dict[int, str], code: int | None, missing: str = "unknown") -> str:
    return table.get(code, missing) if code is not None else missing


# ============================================================================
# Picture quality sections
# ============================================================================

class InferenceSettings(EvpModel):
    number_of_iterations: StrictInt | None = None


class CameraImageSize(EvpModel):
    width: StrictInt | None = None
    height: StrictInt | None = None
    scaling_policy: StrictInt | None = None


class FrameRate(EvpModel):
    num: StrictInt | None = None
    denom: StrictInt | None = None

    def fps(self) -> float | None:
        if not self.num or not self.denom:
            return None
        return self.num / self.denom


class CameraImageFlip(EvpModel):
    flip_horizontal: StrictInt | None = None
    flip_vertical: StrictInt | None = None


class AutoExposure(EvpModel):
    max_exposure_time: StrictInt | None = None
    min_exposure_time: StrictInt | None = None
    max_gain: StrictFloat | None = None
    convergence_speed: StrictInt | None = None


class AutoExposureMetering(EvpModel):
    metering_mode: StrictInt | None = None
    top: StrictInt | None = None
    left: StrictInt | None = None
    bottom: StrictInt | None = None
    right: StrictInt | None = None


class ManualExposure(EvpModel):
    exposure_time: StrictInt | None = None
    gain: StrictFloat | None = None


class AutoWhiteBalance(EvpModel):
    convergence_speed: StrictInt | None = None


class ManualWhiteBalancePreset(EvpModel):
    color_temperature: StrictInt | None = None


class ImageCropping(EvpModel):
    left: StrictInt | None = None
    top: StrictInt | None = None
    width: StrictInt | None = None
    height: StrictInt | None = None


class RegisterAccess(EvpModel):
    bit_length: StrictInt | None = None
    id: StrictInt | None = None
    address: StrictStr | None = None
    data: StrictStr | None = None


class PQSettings(EvpModel):
    camera_image_size: CameraImageSize | None = None
    frame_rate: FrameRate | None = None
    digital_zoom: StrictFloat | None = None
    camera_image_flip: CameraImageFlip | None = None
    exposure_mode: StrictInt | None = None
    auto_exposure: AutoExposure | None = None
    auto_exposure_metering: AutoExposureMetering | None = None
    ev_compensation: StrictFloat | None = None
    ae_anti_flicker_mode: StrictInt | None = None
    manual_exposure: ManualExposure | None = None
    white_balance_mode: StrictInt | None = None
    auto_white_balance: AutoWhiteBalance | None = None
    manual_white_balance_preset: ManualWhiteBalancePreset | None = None
    image_cropping: ImageCropping | None = None
    image_rotation: StrictInt | None = None
    register_access: tuple[RegisterAccess, ...] | None = None

    def exposure_mode_str(self) -> str:
        return _name(EXPOSURE_MODE_NAMES, self.exposure_mode)

    def white_balance_mode_str(self) -> str:
        return _name(WHITE_BALANCE_MODE_NAMES, self.white_balance_mode)

    def scaling_policy_str(self) -> str:
        size = self.camera_image_size
        return _name(SCALING_POLICY_NAMES, size.scaling_policy if size else None)


# ============================================================================
# Port / codec / common sections
# ============================================================================

class DataInterface(EvpModel):
    method: StrictInt | None = None
    storage_name: StrictStr | None = None
    endpoint: StrictStr | None = None
    path: StrictStr | None = None
    enabled: StrictBool | None = None

    def method_str(self) -> str:
        return _name(PORT_METHOD_NAMES, self.method, "none")


class PortSettings(EvpModel):
    metadata: DataInterface | None = None
    input_tensor: DataInterface | None = None


class CodecSettings(EvpModel):
    format: StrictInt | None = None

    def format_str(self) -> str:
        return _name(CODEC_FORMAT_NAMES, self.format)


class CommonSettings(EvpModel):
    model_config = ConfigDict(title="common_settings")

    process_state: StrictInt | None = None
    log_level: StrictInt | None = None
    inference_settings: InferenceSettings | None = None
    pq_settings: PQSettings | None = None
    port_settings: PortSettings | None = None
    codec_settings: CodecSettings | None = None
    number_of_inference_per_message: StrictInt | None = None
    upload_interval: StrictInt | None = None

    def process_state_str(self) -> str:
        return _name(PROCESS_STATE_NAMES, self.process_state)

    def log_level_str(self) -> str:
        return _name(LOG_LEVEL_NAMES, self.log_level)


# ============================================================================
# Custom settings
# ============================================================================

class AiModelBundle(EvpModel):
    ai_model_bundle_id: StrictStr = ""


class CustomSettings(EvpModel):
    """Application-defined section; unknown keys are kept as extra fields."""
    model_config = ConfigDict(extra="allow")

    res_info: ResInfo | None = None
    ai_models: dict[str, AiModelBundle] = Field(default_factory=dict)

    def bundle_ids(self) -> dict[str, str]:
        return {name: bundle.ai_model_bundle_id for name, bundle in self.ai_models.items()}


# ============================================================================
# Edge app documents
# ============================================================================

class EdgeApp(EvpModel):
    """Strict edge app state."""
    model_config = ConfigDict(title="edge_app", extra="forbid")

    req_info: ReqInfo | None = None
    common_settings: CommonSettings
    custom_settings: CustomSettings | None = None
    res_info: ResInfo | None = None


class EdgeAppPassthrough(EvpModel):
    """Permissive edge app state; unknown keys are ignored."""
    model_config = ConfigDict(title="edge_app")

    ANY_OF: ClassVar[tuple[str, ...]] = (
        "req_info",
        "res_info",
        "common_settings",
        "custom_settings",
    )

    req_info: ReqInfo | None = None
    res_info: ResInfo | None = None
    common_settings: CommonSettings | None = None
    custom_settings: CustomSettings | None = None

    def process_state_str(self) -> str:
        if self.common_settings is None:
            return "unknown"
        return self.common_settings.process_state_str()

    def log_level_str(self) -> str:
        if self.common_settings is None:
            return "unknown"
        return self.common_settings.log_level_str()

    def response_code_str(self) -> str:
        if self.res_info is None or self.res_info.code is None:
            return "unknown"
        return self.res_info.code_str() or "unknown"


@dataclass(frozen=True)
class EdgeAppInfo:
    """Edge app settings bound to the instance named in the envelope key."""
    instance_id: UUID
    settings: EdgeApp | EdgeAppPassthrough

    @staticmethod
    def instance_from_key(key: str) -> UUID:
        match = EDGE_APP_KEY_RE.fullmatch(key)
        if not match:
            raise DecodeError(f"{key!r} is not an edge app key")
        try:
            return UUID(match.group(1))
        except InvalidFormat as e:
            raise DecodeError(f"{key!r}: {e}") from e

    @classmethod
    def decode_strict(cls, key: str, obj: dict[str, Any]) -> "EdgeAppInfo":
        return cls(instance_id=cls.instance_from_key(key), settings=EdgeApp.decode(obj))

    @classmethod
    def decode_passthrough(cls, key: str, obj: dict[str, Any]) -> "EdgeAppInfo":
        return cls(
            instance_id=cls.instance_from_key(key),
            settings=EdgeAppPassthrough.decode(obj),
        )

    @property
    def is_passthrough(self) -> bool:
        return isinstance(self.settings, EdgeAppPassthrough)
