# pylint: disable=missing-module-docstring,missing-function-docstring
import json


INSTANCE_ID = "6f1b1a4e-5a3c-4c55-9d59-0f6f3a1c2b10"
MODULE_ID = "0d3e8a2b-77c1-4a0e-b1f4-93c5a6d8e201"
DEPLOYMENT_ID = "c2a9e6f0-1b7d-4e3a-8f25-4d6b9a0c1e33"

STATE_TOPIC = "v1/devices/me/attributes"


def state_envelope(entries):
    """Attribute-state payload with each document JSON-encoded as a string."""
    return json.dumps({
        key: value if isinstance(value, (int, float)) else json.dumps(value)
        for key, value in entries.items()
    })


class FakeSession:
    """In-memory stand-in for MqttSession."""

    def __init__(self, inbound=None, publish_error=None):
        self.inbound = list(inbound or [])
        self.published = []
        self.publish_error = publish_error
        self.recv_timeouts = []

    def recv(self, timeout):
        self.recv_timeouts.append(timeout)
        if not self.inbound:
            return None
        item = self.inbound.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def publish(self, topic, payload, qos=1):
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append((topic, payload, qos))


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
