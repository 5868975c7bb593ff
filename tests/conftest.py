# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring,protected-access
# pylint: disable=unused-argument,too-few-public-methods,no-member,use-implicit-booleaness-not-comparison,line-too-long
# pylint: disable=invalid-name,wrong-import-position,wrong-import-order,duplicate-code
import os
import sys

import pytest


ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
MONITOR_DIR = os.path.join(ROOT_DIR, "addon", "evp-monitor")
if MONITOR_DIR not in sys.path:
    sys.path.insert(0, MONITOR_DIR)


from helpers import DEPLOYMENT_ID, INSTANCE_ID, MODULE_ID  # noqa: E402


@pytest.fixture
def system_info_doc():
    return {
        "os": "NuttX",
        "arch": "xtensa",
        "evp_agent": "v1.40.0",
        "evp_agent_commit_hash": "8d1f2c3",
        "wasmMicroRuntime": "v2.1.0",
        "protocolVersion": "EVP2-TB",
    }


@pytest.fixture
def deployment_doc():
    return {
        "instances": {
            INSTANCE_ID: {"status": "ok", "moduleId": MODULE_ID},
        },
        "modules": {
            MODULE_ID: {"status": "ok"},
        },
        "deploymentId": DEPLOYMENT_ID,
        "reconcileStatus": "ok",
    }


@pytest.fixture
def device_info_doc():
    return {
        "device_manifest": "eyJhbGciOiJFUzI1NiJ9.e30.sig",
        "chips": [
            {
                "name": "main_chip",
                "id": "100A50500A2010072664012000000000",
                "hardware_version": "1.0",
                "temperature": 41,
                "loader_version": "020000",
                "loader_hash": "ab12",
                "update_date_loader": "2025-01-10T08:00:00Z",
                "firmware_version": "0700F6",
                "firmware_hash": "cd34",
                "update_date_firmware": "2025-01-11T08:00:00Z",
                "ai_models": [],
            },
            {
                "name": "sensor_chip",
                "id": "100A50500A2010072664012000000001",
                "temperature": 38,
                "ai_models": [
                    {"version": "0308000000", "hash": "", "update_date": "2025-02-01T00:00:00Z"},
                ],
            },
        ],
    }

