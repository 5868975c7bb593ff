#!/usr/bin/env python3
"""
EVP agent documents: system info, device config and deployment status.
"""

import json
from typing import Any, ClassVar

from pydantic import ConfigDict, Field, StrictStr, field_validator

from evp_model import EvpModel, NonNegativeInt
from evp_uuid import UUID


def _json_text(value: Any) -> Any:
    # some agents inline an object where a JSON string is documented
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


# ============================================================================
# Agent system info
# ============================================================================

class AgentSystemInfo(EvpModel):
    """Agent build and runtime descriptor (``systemInfo`` key)."""
    model_config = ConfigDict(title="systemInfo", extra="forbid")

    os: StrictStr = Field(min_length=1)
    arch: StrictStr = Field(min_length=1)
    evp_agent: StrictStr = Field(min_length=1)
    wasm_micro_runtime: StrictStr = Field(alias="wasmMicroRuntime", min_length=1)
    protocol_version: StrictStr = Field(alias="protocolVersion", min_length=1)
    evp_agent_commit_hash: StrictStr | None = None
    deployment_status: str | None = Field(default=None, alias="deploymentStatus")

    @field_validator("deployment_status", mode="before")
    @classmethod
    def inline_deployment_as_text(cls, value: Any) -> Any:
        return _json_text(value)

    @classmethod
    def default(cls) -> "AgentSystemInfo":
        """Placeholder shown before the agent has reported."""
        return cls.model_construct(
            os="", arch="", evp_agent="", wasm_micro_runtime="", protocol_version=""
        )


# ============================================================================
# Agent device config
# ============================================================================

class AgentDeviceConfig(EvpModel):
    """Agent reporting configuration folded from ``state/$agent/*`` keys."""
    model_config = ConfigDict(title="agent_device_config", extra="forbid")

    ENVELOPE_PREFIX: ClassVar[str] = "state/$agent/"
    ANY_OF: ClassVar[tuple[str, ...]] = (
        "report-status-interval-min",
        "report-status-interval-max",
    )

    report_status_interval_min: NonNegativeInt = Field(
        default=0, alias="report-status-interval-min"
    )
    report_status_interval_max: NonNegativeInt = Field(
        default=0, alias="report-status-interval-max"
    )
    registry_auth: str = Field(default="", alias="registry-auth")
    configuration_id: StrictStr = Field(default="", alias="configuration-id")

    @field_validator("registry_auth", mode="before")
    @classmethod
    def registry_auth_as_text(cls, value: Any) -> Any:
        return _json_text(value)

    @classmethod
    def fold_envelope(cls, envelope: dict[str, Any]) -> dict[str, Any] | None:
        """Collect ``state/$agent/<name>`` entries into one candidate object."""
        folded = {
            key[len(cls.ENVELOPE_PREFIX):]: value
            for key, value in envelope.items()
            if key.startswith(cls.ENVELOPE_PREFIX)
        }
        return folded or None


# ============================================================================
# Deployment status
# ============================================================================

class Instance(EvpModel):
    status: StrictStr = ""
    module_id: UUID = Field(alias="moduleId")
    failure_message: StrictStr | None = Field(default=None, alias="failureMessage")


class Module(EvpModel):
    status: StrictStr = ""
    failure_message: StrictStr | None = Field(default=None, alias="failureMessage")


class DeploymentStatus(EvpModel):
    """Reconciliation state of deployed instances and modules."""
    model_config = ConfigDict(title="deploymentStatus", extra="forbid")

    ANY_OF: ClassVar[tuple[str, ...]] = (
        "instances",
        "modules",
        "deploymentId",
        "reconcileStatus",
    )

    instances: dict[UUID, Instance] = Field(default_factory=dict)
    modules: dict[UUID, Module] = Field(default_factory=dict)
    deployment_id: UUID | None = Field(default=None, alias="deploymentId")
    reconcile_status: StrictStr | None = Field(default=None, alias="reconcileStatus")

    @classmethod
    def parse(cls, raw: str | bytes) -> "DeploymentStatus":
        return cls.from_json(raw)

    def has_instance(self, instance_id: UUID) -> bool:
        return instance_id in self.instances

    def module_of(self, instance_id: UUID) -> Module | None:
        """Module record backing an instance, if both are known."""
        instance = self.instances.get(instance_id)
        if instance is None:
            return None
        return self.modules.get(instance.module_id)
