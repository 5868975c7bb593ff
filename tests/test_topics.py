# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring,protected-access
# pylint: disable=unused-argument,too-few-public-methods,no-member,use-implicit-booleaness-not-comparison,line-too-long
# pylint: disable=invalid-name,wrong-import-position,wrong-import-order,duplicate-code
import pytest

from errors import InvalidFormat
from topics import (
    TopicKind,
    attribute_request_topic,
    attribute_response_topic,
    classify_topic,
)


@pytest.mark.parametrize("who,req_id", [
    ("me", 0),
    ("me", 1000),
    ("device-01", 42),
    ("aid-0001:cam", 4294967295),
])
def test_attribute_request_round_trip(who, req_id):
    topic = attribute_request_topic(who, req_id)
    parsed = classify_topic(topic)
    assert parsed.kind == TopicKind.ATTRIBUTE_REQUEST
    assert parsed.who == who
    assert parsed.req_id == req_id
    assert attribute_request_topic(parsed.who, parsed.req_id) == topic


@pytest.mark.parametrize("topic,kind,who,req_id", [
    ("v1/devices/me/attributes/response/7", TopicKind.ATTRIBUTE_RESPONSE, "me", 7),
    ("v1/devices/me/attributes", TopicKind.ATTRIBUTE_STATE, "me", None),
    ("v1/devices/me/attributes/response", TopicKind.SERVER_ATTRIBUTES, "me", None),
    ("v1/devices/me/rpc/request/12", TopicKind.SERVER_RPC, "me", 12),
    ("v1/devices/me/rpc/response/13", TopicKind.CLIENT_RPC, "me", 13),
    ("v1/devices/me/telemetry", TopicKind.TELEMETRY, "me", None),
])
def test_topic_shapes(topic, kind, who, req_id):
    parsed = classify_topic(topic)
    assert parsed.kind == kind
    assert parsed.who == who
    assert parsed.req_id == req_id


@pytest.mark.parametrize("topic", [
    "",
    "v1/devices",
    "v1/devices/me",
    "v1/devices/me/attributes/request",
    "v1/devices/me/attributes/request/1/extra",
    "v2/devices/me/attributes",
    "homeassistant/sensor/x/config",
    "v1/devices/me/rpc",
])
def test_unrecognized_topics_are_opaque(topic):
    parsed = classify_topic(topic)
    assert parsed.kind == TopicKind.OPAQUE
    assert parsed.who is None


@pytest.mark.parametrize("topic", [
    "v1/devices//attributes/request/1",
    "v1/devices/me/attributes/request/abc",
    "v1/devices/me/attributes/request/-1",
    "v1/devices/me/attributes/response/",
    "v1/devices/me/rpc/request/1.5",
    "v1/devices//attributes",
    "v1/devices/me/attributes/request/1\n",
    "v1/devices/me/attributes/request/\u0661\u0662",
    "v1/devices/me/attributes/request/\uff11",
    "v1/devices/me/attributes/request/4294967296",
    "v1/devices/me/rpc/response/99999999999999999999",
])
def test_structural_match_with_bad_capture_raises(topic):
    with pytest.raises(InvalidFormat):
        classify_topic(topic)


def test_response_topic():
    assert attribute_response_topic("me", 10001) == "v1/devices/me/attributes/response/10001"


@pytest.mark.parametrize("topic", [
    "v1/devices/me/attributes\n",
    "v1/devices/me/telemetry\n",
])
def test_trailing_newline_is_not_a_match(topic):
    assert classify_topic(topic).kind == TopicKind.OPAQUE


def test_request_id_upper_bound_accepted():
    parsed = classify_topic("v1/devices/me/attributes/request/4294967295")
    assert parsed.req_id == 4294967295
