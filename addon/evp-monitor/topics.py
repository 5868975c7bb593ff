#!/usr/bin/env python3
"""
ThingsBoard-style topic grammar used by the EVP agent.
"""

import re
from dataclasses import dataclass
from enum import Enum

from errors import InvalidFormat

# Request ids are unsigned 32-bit on the device side
MAX_REQ_ID = 2**32 - 1


class TopicKind(Enum):
    """Structural category of an MQTT topic."""
    ATTRIBUTE_REQUEST = "attribute_request"    # device -> server, handshake
    ATTRIBUTE_RESPONSE = "attribute_response"  # server -> device, handshake reply
    ATTRIBUTE_STATE = "attribute_state"        # device state report
    SERVER_ATTRIBUTES = "server_attributes"    # server-pushed shared attributes
    SERVER_RPC = "server_rpc"
    CLIENT_RPC = "client_rpc"
    TELEMETRY = "telemetry"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class Topic:
    """Parsed topic: kind plus the captured device name and request id."""
    kind: TopicKind
    who: str | None = None
    req_id: int | None = None


# Ordered: first structural match wins. Patterns must match the whole topic.
# A matched shape with an empty name or a malformed id raises InvalidFormat
# instead of falling through to OPAQUE.
TOPIC_PATTERNS: tuple[tuple[TopicKind, re.Pattern[str]], ...] = (
    (TopicKind.ATTRIBUTE_REQUEST,
     re.compile(r"v1/devices/([^/]*)/attributes/request/([^/]*)")),
    (TopicKind.ATTRIBUTE_RESPONSE,
     re.compile(r"v1/devices/([^/]*)/attributes/response/([^/]*)")),
    (TopicKind.ATTRIBUTE_STATE,
     re.compile(r"v1/devices/([^/]*)/attributes")),
    (TopicKind.SERVER_ATTRIBUTES,
     re.compile(r"v1/devices/([^/]*)/attributes/response")),
    (TopicKind.SERVER_RPC,
     re.compile(r"v1/devices/([^/]*)/rpc/request/([^/]*)")),
    (TopicKind.CLIENT_RPC,
     re.compile(r"v1/devices/([^/]*)/rpc/response/([^/]*)")),
    (TopicKind.TELEMETRY,
     re.compile(r"v1/devices/([^/]*)/telemetry")),
)

_REQ_ID_RE = re.compile(r"[0-9]+")


def _req_id(topic: str, raw_id: str) -> int:
    if not _REQ_ID_RE.fullmatch(raw_id):
        raise InvalidFormat(f"Topic {topic!r}: request id {raw_id!r} is not an integer")
    req_id = int(raw_id)
    if req_id > MAX_REQ_ID:
        raise InvalidFormat(f"Topic {topic!r}: request id {raw_id} out of range")
    return req_id


def classify_topic(topic: str) -> Topic:
    """Classify a topic string.

    Raises:
        InvalidFormat: the topic has a recognized shape but an empty device
            name, a non-numeric request id or one above ``MAX_REQ_ID``.
    """
    for kind, pattern in TOPIC_PATTERNS:
        match = pattern.fullmatch(topic)
        if not match:
            continue
        who = match.group(1)
        if not who:
            raise InvalidFormat(f"Topic {topic!r}: empty device name")
        req_id = None
        if pattern.groups > 1:
            req_id = _req_id(topic, match.group(2))
        return Topic(kind=kind, who=who, req_id=req_id)
    return Topic(kind=TopicKind.OPAQUE)


def attribute_request_topic(who: str, req_id: int) -> str:
    return f"v1/devices/{who}/attributes/request/{req_id}"


def attribute_response_topic(who: str, req_id: int) -> str:
    """Topic the handshake echo is published on."""
    return f"v1/devices/{who}/attributes/response/{req_id}"
