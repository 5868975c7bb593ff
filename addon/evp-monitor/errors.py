#!/usr/bin/env python3
"""
Error taxonomy for the EVP device monitor.

Timeouts are not errors here: device liveness expiry is a state change on
``DeviceState``, never an exception.
"""


class EvpError(Exception):
    """Base class for all monitor errors."""


class InvalidFormat(EvpError):
    """A textual identifier (topic id, UUID, DTMI schema) is malformed."""


class DecodeError(EvpError):
    """A payload violates the schema of the document it was recognized as."""


class UnknownEnumValue(DecodeError):
    """A numeric enum code outside the documented range."""

    def __init__(self, field: str, value: object):
        super().__init__(f"{field}: unknown enum value {value!r}")
        self.field = field
        self.value = value


class TransportError(EvpError):
    """Publishing or receiving on the MQTT session failed."""
