#!/usr/bin/env python3
"""
MQTT session: paho-mqtt client feeding inbound publishes to a queue.

The paho network loop runs in its own thread; ``recv()`` is the only way
messages reach the protocol engine.
"""

import logging
import queue
import time
from typing import Any

from config import (
    MQTT_AVAILABLE,
    MQTT_CLIENT_ID,
    MQTT_CONNECT_TIMEOUT,
    MQTT_HOST,
    MQTT_KEEPALIVE,
    MQTT_PASSWORD,
    MQTT_PORT,
    MQTT_PUBLISH_QOS,
    MQTT_SUBSCRIBE_TOPIC,
    MQTT_USERNAME,
)
from errors import TransportError

if MQTT_AVAILABLE:
    import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)


class MqttSession:
    """Broker connection with a wildcard subscription."""

    # MQTT return codes
    RC_CODES = {
        0: "Connection successful",
        1: "Incorrect protocol version",
        2: "Invalid client identifier",
        3: "Server unavailable",
        4: "Bad username or password",
        5: "Not authorized",
    }

    PUBLISH_LOG_EVERY = 100

    def __init__(
        self,
        host: str = MQTT_HOST,
        port: int = MQTT_PORT,
        client_id: str = MQTT_CLIENT_ID,
        subscribe_topic: str = MQTT_SUBSCRIBE_TOPIC,
        keepalive: int = MQTT_KEEPALIVE,
    ):
        self.host = host
        self.port = port
        self.client_id = client_id
        self.subscribe_topic = subscribe_topic
        self.keepalive = keepalive
        self.client: Any = None
        self.connected = False
        self._inbox: queue.Queue[tuple[str, bytes] | TransportError] = queue.Queue()

        # Stats
        self.received_count = 0
        self.publish_count = 0
        self.publish_failed = 0
        self.last_error_time: float = 0
        self.last_error_msg: str = ""

    def connect(self, timeout: float = MQTT_CONNECT_TIMEOUT) -> bool:
        """Connect and wait up to ``timeout`` seconds for CONNACK."""
        if not MQTT_AVAILABLE:
            logger.error("MQTT: paho-mqtt is not installed")
            return False

        try:
            self.client = mqtt.Client(
                callback_api_version=mqtt.CallbackAPIVersion.VERSION1,
                client_id=self.client_id,
                protocol=mqtt.MQTTv311
            )
            if MQTT_USERNAME:
                self.client.username_pw_set(MQTT_USERNAME, MQTT_PASSWORD)

            self.client.on_connect = self._on_connect
            self.client.on_disconnect = self._on_disconnect
            self.client.on_message = self._on_message

            logger.info(
                f"MQTT: Connecting to {self.host}:{self.port} "
                f"(timeout {timeout}s)"
            )
            self.client.connect(self.host, self.port, self.keepalive)
            self.client.loop_start()

            start = time.time()
            while not self.connected and (time.time() - start) < timeout:
                time.sleep(0.1)

            if self.connected:
                logger.info(f"MQTT: Connected to {self.host}:{self.port}")
                return True
            logger.error(f"MQTT: Connection timeout after {timeout}s")
            self._cleanup_client()
            return False

        except (OSError, ValueError) as e:
            logger.error(f"MQTT: Connection failed: {e}")
            self._cleanup_client()
            return False

    def _cleanup_client(self) -> None:
        if self.client:
            try:
                self.client.loop_stop()
                self.client.disconnect()
            except (OSError, RuntimeError) as e:
                logger.debug(f"MQTT: Client cleanup failed: {e}")
            self.client = None
        self.connected = False

    def disconnect(self) -> None:
        logger.info("MQTT: Disconnecting")
        self._cleanup_client()

    # ------------------------------------------------------------------
    # paho callbacks (network thread)
    # ------------------------------------------------------------------

    def _on_connect(
        self, client: Any, userdata: Any, flags: Any, rc: int
    ) -> None:
        rc_msg = self.RC_CODES.get(rc, f"Unknown error ({rc})")
        if rc == 0:
            logger.info(f"MQTT: Connected (flags={flags})")
            self.connected = True
            client.subscribe(self.subscribe_topic, qos=MQTT_PUBLISH_QOS)
            logger.info(f"MQTT: Subscribed to {self.subscribe_topic}")
        else:
            logger.error(f"MQTT: Connection refused: {rc_msg}")
            self.connected = False
            self.last_error_time = time.time()
            self.last_error_msg = rc_msg

    def _on_disconnect(self, client: Any, userdata: Any, rc: int) -> None:
        self.connected = False
        if rc == 0:
            logger.info("MQTT: Disconnected (clean)")
            return
        logger.warning(f"MQTT: Unexpected disconnect (rc={rc})")
        self.last_error_time = time.time()
        self.last_error_msg = f"Unexpected disconnect (rc={rc})"
        self._inbox.put(TransportError(self.last_error_msg))

    def _on_message(self, client: Any, userdata: Any, msg: Any) -> None:
        self.received_count += 1
        self._inbox.put((msg.topic, bytes(msg.payload)))

    # ------------------------------------------------------------------
    # Engine-facing API
    # ------------------------------------------------------------------

    def recv(self, timeout: float) -> tuple[str, bytes] | None:
        """Next inbound publish, or None if nothing arrived in ``timeout``.

        Raises:
            TransportError: a receive-side failure was reported by paho.
        """
        try:
            item = self._inbox.get(timeout=timeout)
        except queue.Empty:
            return None
        if isinstance(item, TransportError):
            raise item
        return item

    def publish(self, topic: str, payload: bytes | str, qos: int = MQTT_PUBLISH_QOS) -> None:
        """Fire-and-forget publish; paho handles the QoS exchange.

        Raises:
            TransportError: not connected or rejected by the client.
        """
        self.publish_count += 1
        if self.client is None or not self.connected:
            self.publish_failed += 1
            raise TransportError(f"Publish to {topic} failed: not connected")
        result = self.client.publish(topic, payload, qos=qos, retain=False)
        if result.rc != 0:
            self.publish_failed += 1
            self.last_error_time = time.time()
            self.last_error_msg = f"Publish rc={result.rc}"
            raise TransportError(f"Publish to {topic} failed (rc={result.rc})")
        if self.publish_count % self.PUBLISH_LOG_EVERY == 0:
            logger.info(
                f"MQTT: Stats: {self.publish_count - self.publish_failed} OK, "
                f"{self.publish_failed} FAIL of {self.publish_count}"
            )

    def get_stats(self) -> dict[str, Any]:
        return {
            "connected": self.connected,
            "received": self.received_count,
            "published": self.publish_count,
            "publish_failed": self.publish_failed,
            "last_error": self.last_error_msg or None,
        }
