#!/usr/bin/env python3
"""
MqttCtrl - protocol engine for the monitored EVP device.

Pulls one publish per ``poll()``, classifies it, performs the attribute
handshake echo, merges documents into ``DeviceState`` and derives device
liveness from message timing.
"""

import logging
import time
from typing import Any, Callable, Protocol

from config import (
    DEVICE_LIVENESS_TIMEOUT_S,
    MQTT_PUBLISH_QOS,
    POLL_TIMEOUT_S,
    RECV_ERROR_WARN_THRESHOLD,
)
from device_state import DeviceState
from errors import DecodeError, InvalidFormat, TransportError
from models import (
    ConnectRequest,
    ConnectResponse,
    DocumentKind,
    DocumentMessage,
    EvpMessage,
    RawMessage,
    RpcClient,
)
from parser import EvpMessageParser
from topics import attribute_response_topic

logger = logging.getLogger(__name__)


class Session(Protocol):
    def recv(self, timeout: float) -> tuple[str, bytes] | None: ...

    def publish(self, topic: str, payload: bytes | str, qos: int = ...) -> None: ...


class MqttCtrl:
    """Single-device protocol engine."""

    def __init__(
        self,
        session: Session,
        state: DeviceState | None = None,
        *,
        liveness_timeout: float = DEVICE_LIVENESS_TIMEOUT_S,
        recv_error_warn_threshold: int = RECV_ERROR_WARN_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self.state = state if state is not None else DeviceState()
        self.liveness_timeout = liveness_timeout
        self.recv_error_warn_threshold = recv_error_warn_threshold
        self._clock = clock
        self._wall_clock = wall_clock
        self._last_activity: float | None = None

        # Stats
        self.consecutive_recv_errors = 0
        self.recv_errors_total = 0
        self.messages_processed = 0
        self.echo_sent = 0
        self.echo_failed = 0
        self.decode_failed = 0

    # ------------------------------------------------------------------
    # Poll loop
    # ------------------------------------------------------------------

    def poll(self, timeout: float = POLL_TIMEOUT_S) -> dict[str, str]:
        """Receive and process at most one publish.

        Returns the ``{topic: payload}`` view of messages not captured by a
        typed field, ``{}`` otherwise.

        Raises:
            DecodeError: a recognized document is malformed.
            InvalidFormat: a recognized topic carries a malformed id.
            TransportError: the handshake echo could not be published.
        """
        try:
            try:
                item = self.session.recv(timeout)
            except TransportError as e:
                self._note_recv_error(e)
                return {}
            self.consecutive_recv_errors = 0
            if item is None:
                return {}
            topic, payload = item
            return self.process_message(topic, payload)
        finally:
            self.check_liveness()

    def _note_recv_error(self, error: TransportError) -> None:
        self.consecutive_recv_errors += 1
        self.recv_errors_total += 1
        if self.consecutive_recv_errors >= self.recv_error_warn_threshold:
            logger.warning(
                f"EVP: {self.consecutive_recv_errors} consecutive receive "
                f"errors (last: {error})"
            )
        else:
            logger.info(f"EVP: Receive error: {error}")

    def process_message(self, topic: str, payload: bytes | str) -> dict[str, str]:
        """Classify one publish and apply its side effects."""
        raw = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            self.decode_failed += 1
            raise DecodeError(f"Payload on {topic} is not valid UTF-8") from e

        try:
            message = EvpMessageParser.classify(topic, text)
        except (DecodeError, InvalidFormat) as e:
            self.decode_failed += 1
            logger.warning(f"EVP: Decode failed on {topic}: {e}")
            raise

        self.messages_processed += 1
        return self._apply(topic, message, raw, text)

    def _apply(self, topic: str, message: EvpMessage, raw: bytes, text: str) -> dict[str, str]:
        if isinstance(message, ConnectRequest):
            self._mark_activity()
            self._echo(message, raw)
            return {}

        if isinstance(message, ConnectResponse):
            logger.debug(f"EVP: Attribute response for {message.who}/{message.req_id}")
            return {topic: text}

        if isinstance(message, DocumentMessage):
            self._mark_activity()
            if (
                message.kind == DocumentKind.EDGE_APP_PASSTHROUGH
                and not self.state.is_instance_deployed(message.document.instance_id)
            ):
                logger.debug(
                    f"EVP: Edge app {message.document.instance_id} not in "
                    "deployment status, passing through"
                )
                return {topic: text}
            self.state.apply_document(message.kind, message.document)
            return {}

        if isinstance(message, RpcClient):
            self._mark_activity()
            return message.as_map()

        if isinstance(message, RawMessage):
            return message.as_map()

        raise TypeError(f"Unhandled message type: {type(message).__name__}")

    def _echo(self, request: ConnectRequest, raw: bytes) -> None:
        topic = attribute_response_topic(request.who, request.req_id)
        try:
            self.session.publish(topic, raw, qos=MQTT_PUBLISH_QOS)
        except TransportError as e:
            self.echo_failed += 1
            logger.error(f"EVP: Attribute echo to {topic} failed: {e}")
            raise
        self.echo_sent += 1
        logger.info(f"EVP: Attribute request {request.req_id} from {request.who} echoed")

    # ------------------------------------------------------------------
    # Liveness
    # ------------------------------------------------------------------

    def _mark_activity(self) -> None:
        self._last_activity = self._clock()
        if self.state.mark_activity(self._wall_clock()):
            logger.info("EVP: Device connected")

    def check_liveness(self) -> bool:
        """Expire the connection after ``liveness_timeout`` of silence."""
        if (
            self._last_activity is not None
            and self._clock() - self._last_activity >= self.liveness_timeout
            and self.state.mark_disconnected()
        ):
            logger.warning(
                f"EVP: Device disconnected (no activity for "
                f"{self.liveness_timeout:.0f}s)"
            )
        return self.state.connected

    def is_device_connected(self) -> bool:
        return self.state.connected

    def get_stats(self) -> dict[str, Any]:
        return {
            "messages": self.messages_processed,
            "echo_sent": self.echo_sent,
            "echo_failed": self.echo_failed,
            "decode_failed": self.decode_failed,
            "recv_errors": self.recv_errors_total,
        }
