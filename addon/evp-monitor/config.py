#!/usr/bin/env python3
"""
EVP device monitor configuration - constants and environment variables.
"""

import os

# ============================================================================
# MQTT Availability Check
# ============================================================================
try:
    import paho.mqtt.client  # noqa: F401
    MQTT_AVAILABLE = True
except ImportError:
    MQTT_AVAILABLE = False

# ============================================================================
# Helpers
# ============================================================================


def _get_int_env(name: str, default: int) -> int:
    """Return an int env var, falling back to default on empty/invalid."""
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = str(raw).strip()
    if raw == "" or raw.lower() == "null":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """Return a float env var, falling back to default on empty/invalid."""
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = str(raw).strip()
    if raw == "" or raw.lower() == "null":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ============================================================================
# MQTT Configuration
# ============================================================================
MQTT_HOST = os.getenv("MQTT_HOST", "localhost")
MQTT_PORT = _get_int_env("MQTT_PORT", 1883)
MQTT_USERNAME = os.getenv("MQTT_USERNAME", "")
MQTT_PASSWORD = os.getenv("MQTT_PASSWORD", "")
MQTT_CLIENT_ID = os.getenv("MQTT_CLIENT_ID", "device-monitor")
MQTT_KEEPALIVE = _get_int_env("MQTT_KEEPALIVE", 60)
MQTT_SUBSCRIBE_TOPIC = os.getenv("MQTT_SUBSCRIBE_TOPIC", "#")
MQTT_PUBLISH_QOS = 1  # attribute-response echo is always at-least-once
MQTT_CONNECT_TIMEOUT = _get_float_env("MQTT_CONNECT_TIMEOUT", 10.0)

# ============================================================================
# Protocol Engine
# ============================================================================
POLL_TIMEOUT_S = _get_float_env("POLL_TIMEOUT_S", 0.1)
# 5 minutes without device activity -> disconnected
DEVICE_LIVENESS_TIMEOUT_S = _get_float_env("DEVICE_LIVENESS_TIMEOUT_S", 300.0)
RECV_ERROR_WARN_THRESHOLD = _get_int_env("RECV_ERROR_WARN_THRESHOLD", 3)
ELOG_HISTORY_SIZE = _get_int_env("ELOG_HISTORY_SIZE", 1000)

# ============================================================================
# Runtime
# ============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
STATUS_LOG_INTERVAL = _get_int_env("STATUS_LOG_INTERVAL", 60)
