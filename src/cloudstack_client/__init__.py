"""cloudstack-client - metadata-driven client for CloudStack-compatible management APIs.

The command catalog is discovered at runtime through ``listApis``; every call
is validated against it, signed, executed, and normalized into a uniform
result, with asynchronous jobs polled to completion.

Usage:
    from cloudstack_client import CloudStackSession, JSONProfileStore

    with CloudStackSession.open("default", JSONProfileStore()) as session:
        session.load_catalog()
        result = session.call("listVirtualMachines", {"state": "Running"})
        vms = session.call("deployVirtualMachine", {...}, wait=300)
"""

__version__ = "0.1.0"

from cloudstack_client.database.json_profile_store import JSONProfileStore
from cloudstack_client.exceptions import (
    ApiError,
    CatalogError,
    CloudStackClientError,
    CommandNotFoundError,
    ConfigurationError,
    JobFailedError,
    JobTimeoutWarning,
    MissingParameterError,
    ProfileNotFoundError,
    TransportError,
    ValidationError,
)
from cloudstack_client.models.profile import ConnectionProfile
from cloudstack_client.models.results import ErrorResult, PendingJobResult, SuccessResult
from cloudstack_client.session import CloudStackSession

__all__: list = [
    "ApiError",
    "CatalogError",
    "CloudStackClientError",
    "CloudStackSession",
    "CommandNotFoundError",
    "ConfigurationError",
    "ConnectionProfile",
    "ErrorResult",
    "JobFailedError",
    "JobTimeoutWarning",
    "JSONProfileStore",
    "MissingParameterError",
    "PendingJobResult",
    "ProfileNotFoundError",
    "SuccessResult",
    "TransportError",
    "ValidationError",
]
