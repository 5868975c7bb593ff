#!/usr/bin/env python3
"""
Classifier turning raw MQTT publishes into EVP messages.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from device_info import DeviceCapabilities, DeviceInfo, DeviceReserved, DeviceStates
from edge_app import EDGE_APP_KEY_RE, EdgeAppInfo
from elog import TELEMETRY_KEY, Elog
from errors import DecodeError
from evp_state import AgentDeviceConfig, AgentSystemInfo, DeploymentStatus
from models import (
    ClientOpaque,
    ConnectRequest,
    ConnectResponse,
    DocumentKind,
    DocumentMessage,
    EvpMessage,
    NonProtocol,
    RpcClient,
    RpcServer,
    ServerOpaque,
)
from system_settings import NetworkSettings, SystemSettings, WirelessSettings
from topics import TopicKind, classify_topic

logger = logging.getLogger(__name__)

# Synthetic envelope key for the folded state/$agent/* entries
AGENT_CONFIG_KEY = "state/$agent/*"


@dataclass(frozen=True)
class DocumentDecoder:
    """One entry of the trial table.

    ``key_pattern`` names the envelope keys the document is normally
    published under; a failed decode under such a key is reported instead
    of degrading to an opaque message.
    """
    kind: DocumentKind
    decode: Callable[[str, dict[str, Any]], Any]
    key_pattern: re.Pattern[str]


def _by_body(document_cls) -> Callable[[str, dict[str, Any]], Any]:
    return lambda _key, obj: document_cls.decode(obj)


DOCUMENT_TRIAL_ORDER: tuple[DocumentDecoder, ...] = (
    DocumentDecoder(DocumentKind.DEVICE_INFO, _by_body(DeviceInfo),
                    re.compile(r"^state/\$system/device_info\Z")),
    DocumentDecoder(DocumentKind.DEVICE_STATES, _by_body(DeviceStates),
                    re.compile(r"^state/\$system/device_states\Z")),
    DocumentDecoder(DocumentKind.DEVICE_CAPABILITIES, _by_body(DeviceCapabilities),
                    re.compile(r"^state/\$system/device_capabilities\Z")),
    DocumentDecoder(DocumentKind.DEVICE_RESERVED, _by_body(DeviceReserved),
                    re.compile(r"^state/\$system/PRIVATE_reserved\Z")),
    DocumentDecoder(DocumentKind.AGENT_SYSTEM_INFO, _by_body(AgentSystemInfo),
                    re.compile(r"^systemInfo\Z")),
    DocumentDecoder(DocumentKind.AGENT_DEVICE_CONFIG, _by_body(AgentDeviceConfig),
                    re.compile(r"^state/\$agent/")),
    DocumentDecoder(DocumentKind.SYSTEM_SETTINGS, _by_body(SystemSettings),
                    re.compile(r"^state/\$system/system_settings\Z")),
    DocumentDecoder(DocumentKind.NETWORK_SETTINGS, _by_body(NetworkSettings),
                    re.compile(r"^state/\$system/network_settings\Z")),
    DocumentDecoder(DocumentKind.WIRELESS_SETTINGS, _by_body(WirelessSettings),
                    re.compile(r"^state/\$system/wireless_setting\Z")),
    DocumentDecoder(DocumentKind.DEPLOYMENT_STATUS, _by_body(DeploymentStatus),
                    re.compile(r"^deploymentStatus\Z")),
    DocumentDecoder(DocumentKind.EDGE_APP, EdgeAppInfo.decode_strict, EDGE_APP_KEY_RE),
    DocumentDecoder(DocumentKind.EDGE_APP_PASSTHROUGH, EdgeAppInfo.decode_passthrough,
                    EDGE_APP_KEY_RE),
)


class EvpMessageParser:
    """Classifier for EVP topics and attribute envelopes."""

    @staticmethod
    def classify(
        topic: str,
        payload: str,
        decoders: tuple[DocumentDecoder, ...] = DOCUMENT_TRIAL_ORDER,
    ) -> EvpMessage:
        """Classify one publish.

        Raises:
            InvalidFormat: recognized topic shape with an empty device name
                or a malformed request id.
            DecodeError: a document published under its own envelope key
                fails to decode.
        """
        parsed = classify_topic(topic)
        kind = parsed.kind

        if kind == TopicKind.ATTRIBUTE_REQUEST:
            return ConnectRequest(who=parsed.who, req_id=parsed.req_id)
        if kind == TopicKind.ATTRIBUTE_RESPONSE:
            return ConnectResponse(who=parsed.who, req_id=parsed.req_id)
        if kind == TopicKind.ATTRIBUTE_STATE:
            return EvpMessageParser.parse_state_envelope(topic, payload, decoders)
        if kind == TopicKind.SERVER_ATTRIBUTES:
            return ServerOpaque(topic, payload)
        if kind == TopicKind.SERVER_RPC:
            return RpcServer(topic, payload)
        if kind == TopicKind.CLIENT_RPC:
            return RpcClient(topic, payload)
        if kind == TopicKind.TELEMETRY:
            return EvpMessageParser.parse_telemetry(topic, payload)
        return NonProtocol(topic, payload)

    @staticmethod
    def _envelope(payload: str) -> dict[str, Any] | None:
        try:
            value = json.loads(payload)
        except (ValueError, RecursionError, TypeError):
            return None
        return value if isinstance(value, dict) else None

    @staticmethod
    def iter_candidates(envelope: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any] | None]]:
        """Yield ``(key, object)`` per envelope entry in order.

        String values are JSON-decoded; values that are not objects yield
        ``None``. All ``state/$agent/*`` entries are folded into a single
        candidate at the position of the first one.
        """
        agent_folded = False
        for key, value in envelope.items():
            if key.startswith(AgentDeviceConfig.ENVELOPE_PREFIX):
                if not agent_folded:
                    agent_folded = True
                    yield AGENT_CONFIG_KEY, AgentDeviceConfig.fold_envelope(envelope)
                continue
            if isinstance(value, str):
                try:
                    value = json.loads(value)
                except (ValueError, RecursionError):
                    value = None
            yield key, value if isinstance(value, dict) else None

    @staticmethod
    def parse_state_envelope(
        topic: str,
        payload: str,
        decoders: tuple[DocumentDecoder, ...] = DOCUMENT_TRIAL_ORDER,
    ) -> EvpMessage:
        envelope = EvpMessageParser._envelope(payload)
        if envelope is None:
            logger.debug(f"EVP: state payload on {topic} is not a JSON object")
            return ClientOpaque(topic, payload)

        recognized_error: DecodeError | None = None
        for key, obj in EvpMessageParser.iter_candidates(envelope):
            owners = [d for d in decoders if d.key_pattern.match(key)]
            if obj is None:
                if owners and recognized_error is None:
                    recognized_error = DecodeError(f"{key}: value is not a JSON object")
                continue
            for decoder in decoders:
                try:
                    document = decoder.decode(key, obj)
                except DecodeError as e:
                    if decoder in owners and recognized_error is None:
                        recognized_error = DecodeError(f"{key}: {e}")
                    continue
                logger.debug(f"EVP: {key} -> {decoder.kind.value}")
                return DocumentMessage(kind=decoder.kind, document=document, key=key)

        if recognized_error is not None:
            raise recognized_error
        return ClientOpaque(topic, payload)

    @staticmethod
    def parse_telemetry(topic: str, payload: str) -> EvpMessage:
        envelope = EvpMessageParser._envelope(payload)
        if envelope is None or TELEMETRY_KEY not in envelope:
            return NonProtocol(topic, payload)
        value = envelope[TELEMETRY_KEY]
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except (ValueError, RecursionError) as e:
                raise DecodeError(f"{TELEMETRY_KEY}: invalid JSON: {e}") from e
        elog = Elog.decode(value)
        return DocumentMessage(kind=DocumentKind.EVENT_LOG, document=elog, key=TELEMETRY_KEY)
