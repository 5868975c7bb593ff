# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring,protected-access
# pylint: disable=unused-argument,too-few-public-methods,no-member,use-implicit-booleaness-not-comparison,line-too-long
# pylint: disable=invalid-name,wrong-import-position,wrong-import-order,duplicate-code
import json

import pytest

from elog import Elog
from errors import DecodeError


def _elog_doc(**overrides):
    doc = {
        "serial": "Aid-80070001-0000-2000-9002-000000000000",
        "level": 2,
        "timestamp": "2025-03-04T10:11:12.000Z",
        "component_id": 3,
        "event_id": 0x4010,
    }
    doc.update(overrides)
    return doc


def test_elog_from_json():
    elog = Elog.from_json(json.dumps(_elog_doc(component_name="SystemApp")))

    assert elog.serial.startswith("Aid-")
    assert elog.level_str() == "WARN"
    assert elog.component_name == "SystemApp"
    assert elog.event_description is None
    assert elog.event_str() == "High temperature"


@pytest.mark.parametrize("event_id,expected", [
    (0xB0B2, "Download failed"),
    (0x8A13, "ESF network manager event"),
    (0xF0FF, "EVP event"),
    (0x7001, "Unknown event"),
])
def test_elog_event_str(event_id, expected):
    assert Elog.decode(_elog_doc(event_id=event_id)).event_str() == expected


def test_elog_level_out_of_range():
    assert Elog.decode(_elog_doc(level=9)).level_str() == "UNKNOWN"


@pytest.mark.parametrize("missing", ["serial", "level", "timestamp", "component_id", "event_id"])
def test_elog_requires_fields(missing):
    doc = _elog_doc()
    del doc[missing]
    with pytest.raises(DecodeError):
        Elog.decode(doc)


@pytest.mark.parametrize("overrides", [
    {"level": -1},
    {"event_id": -5},
    {"component_id": "3"},
    {"level": True},
])
def test_elog_invalid_values(overrides):
    with pytest.raises(DecodeError):
        Elog.decode(_elog_doc(**overrides))
