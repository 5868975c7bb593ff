#!/usr/bin/env python3
"""
EVP device monitor - application entry point.
"""

import asyncio
import logging
import sys
import time

from config import (
    LOG_LEVEL,
    MQTT_AVAILABLE,
    MQTT_CLIENT_ID,
    MQTT_HOST,
    MQTT_PORT,
    MQTT_SUBSCRIBE_TOPIC,
    POLL_TIMEOUT_S,
    STATUS_LOG_INTERVAL,
)
from device_state import DeviceState
from errors import EvpError
from mqtt_ctrl import MqttCtrl
from mqtt_session import MqttSession

# Logging setup
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

logger = logging.getLogger(__name__)


def check_requirements() -> bool:
    if not MQTT_AVAILABLE:
        logger.error("paho-mqtt is not installed, cannot monitor devices")
        return False
    return True


def log_status(ctrl: MqttCtrl) -> None:
    status = ctrl.state.get_status()
    logger.info(
        f"Device: connected={status['connected']} "
        f"last_seen={status['last_seen']} agent={status['evp_agent']} "
        f"instances={status['instances']} edge_apps={status['edge_apps']} "
        f"elogs={status['elogs']} | engine={ctrl.get_stats()}"
    )


async def run_monitor(
    ctrl: MqttCtrl,
    stop_event: asyncio.Event,
    poll_timeout: float = POLL_TIMEOUT_S,
    status_interval: float = STATUS_LOG_INTERVAL,
) -> None:
    """Drive ``ctrl.poll`` until ``stop_event`` is set."""
    last_status = time.monotonic()
    while not stop_event.is_set():
        try:
            passthrough = await asyncio.to_thread(ctrl.poll, poll_timeout)
        except EvpError as e:
            logger.warning(f"Poll error: {e}")
            continue
        for topic, payload in passthrough.items():
            logger.debug(f"Passthrough {topic}: {payload[:200]}")

        if status_interval > 0 and time.monotonic() - last_status >= status_interval:
            last_status = time.monotonic()
            log_status(ctrl)


async def main() -> int:
    logger.info("=" * 60)
    logger.info("EVP Device Monitor")
    logger.info("=" * 60)

    if not check_requirements():
        return 1

    logger.info("Configuration:")
    logger.info(f"   Broker: {MQTT_HOST}:{MQTT_PORT}")
    logger.info(f"   Client ID: {MQTT_CLIENT_ID}")
    logger.info(f"   Subscription: {MQTT_SUBSCRIBE_TOPIC}")
    logger.info(f"   Log level: {LOG_LEVEL}")

    session = MqttSession()
    if not session.connect():
        return 1

    ctrl = MqttCtrl(session, DeviceState())
    stop_event = asyncio.Event()
    try:
        await run_monitor(ctrl, stop_event)
    finally:
        session.disconnect()
        log_status(ctrl)
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    run()
