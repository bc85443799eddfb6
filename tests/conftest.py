"""Global test configuration and fixtures."""

import json
import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Keep the settings loader away from the real user config directory.
os.environ.setdefault("CLOUDSTACK_CONFIG_DIR", tempfile.mkdtemp(prefix="cloudstack-client-tests-"))
os.environ.setdefault("CLOUDSTACK_LOG_DESTINATION", "stderr")

import requests  # noqa: E402

from cloudstack_client.api.executor import ApiExecutor  # noqa: E402
from cloudstack_client.config.settings import build_settings  # noqa: E402
from cloudstack_client.models.profile import ConnectionProfile  # noqa: E402

LIST_APIS_PAYLOAD = {
    "listapisresponse": {
        "count": 4,
        "api": [
            {
                "name": "listVirtualMachines",
                "description": "List the virtual machines owned by the account.",
                "isasync": False,
                "related": "deployVirtualMachine,destroyVirtualMachine",
                "params": [
                    {"name": "id", "type": "uuid", "required": False, "description": "the ID of the VM"},
                    {"name": "ids", "type": "list", "required": False, "description": "the IDs of the VMs"},
                    {"name": "name", "type": "string", "required": False, "description": "name of the VM"},
                    {"name": "Name", "type": "string", "required": False, "description": "duplicate casing"},
                    {"name": "listall", "type": "boolean", "required": False, "description": "list all"},
                    {"name": "tags", "type": "map", "required": False, "description": "resource tags"},
                ],
                "response": [
                    {"name": "id", "type": "string", "description": "the ID of the VM"},
                    {"name": "name", "type": "string", "description": "the name of the VM"},
                    {"name": "state", "type": "string", "description": "the state of the VM"},
                    {"name": "zonename", "type": "string", "description": "the zone name"},
                    {"name": "STATE", "type": "string", "description": "duplicate casing"},
                ],
            },
            {
                "name": "deployVirtualMachine",
                "description": "Creates and automatically starts a virtual machine.",
                "isasync": True,
                "related": "listVirtualMachines",
                "params": [
                    {"name": "serviceofferingid", "type": "uuid", "required": True},
                    {"name": "templateid", "type": "uuid", "required": True},
                    {"name": "zoneid", "type": "uuid", "required": True},
                    {"name": "displayname", "type": "string", "required": False},
                ],
                "response": [
                    {"name": "id", "type": "string"},
                    {"name": "name", "type": "string"},
                    {"name": "state", "type": "string"},
                ],
            },
            {
                "name": "deleteSSHKeyPair",
                "description": "Deletes a keypair by name",
                "isasync": False,
                "params": [{"name": "name", "type": "string", "required": True}],
                "response": [
                    {"name": "displaytext", "type": "string"},
                    {"name": "success", "type": "boolean"},
                ],
            },
            {
                "name": "queryAsyncJobResult",
                "description": "Retrieves the current status of asynchronous job.",
                "isasync": False,
                "params": [{"name": "jobid", "type": "uuid", "required": True}],
                "response": [
                    {"name": "jobid", "type": "string"},
                    {"name": "jobstatus", "type": "integer"},
                ],
            },
        ],
    }
}


def make_response(payload=None, text=None, status_code=200, reason="OK"):
    """Build a mocked ``requests.Response``."""
    response = Mock(spec=requests.Response)
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    response.text = text
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    if payload is not None:
        response.json.return_value = payload
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


def job_response(status, jobid="job-1", jobresult=None, jobresultcode=0):
    body = {"jobid": jobid, "jobstatus": status, "jobresultcode": jobresultcode}
    if jobresult is not None:
        body["jobresult"] = jobresult
    return make_response({"queryasyncjobresultresponse": body})


@pytest.fixture
def settings():
    """Settings with no polling delay."""
    return build_settings(POLL_INTERVAL=0, HTTP_TIMEOUT=5, RESPONSE_FORMAT="json", VERIFY_SSL=True)


@pytest.fixture
def profile():
    return ConnectionProfile(
        name="test",
        server="cloud.example.com",
        secure_port=8443,
        unsecure_port=8080,
        use_ssl=False,
        api_key="TESTAPIKEY",
        secret_key="TESTSECRET",
    )


@pytest.fixture
def http_session():
    """A mocked ``requests.Session``; set ``get.side_effect`` or ``get.return_value`` per test."""
    return Mock(spec=requests.Session)


@pytest.fixture
def executor(profile, http_session, settings):
    return ApiExecutor(profile, session=http_session, settings=settings)


@pytest.fixture
def list_apis_payload():
    return json.loads(json.dumps(LIST_APIS_PAYLOAD))


@pytest.fixture
def profiles_file(tmp_path):
    return str(tmp_path / "profiles.json")


@pytest.fixture
def response_factory():
    """Factory for mocked HTTP responses."""
    return make_response


@pytest.fixture
def job_response_factory():
    """Factory for mocked queryAsyncJobResult responses."""
    return job_response
