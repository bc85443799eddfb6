"""Request and result models shared by the registry, executor and job resolver."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from cloudstack_client.exceptions import ApiError, JobFailedError, TransportError
from cloudstack_client.helpers.utils import serialize_to_dict
from cloudstack_client.models.base_enum_model import BaseEnumModel
from cloudstack_client.models.command import ResponseFormat


class JobStatus(BaseEnumModel):
    """Enum representing the ``jobstatus`` values of queryAsyncJobResult."""
    PENDING = 0
    SUCCEEDED = 1
    FAILED = 2


@dataclass(frozen=True)
class ApiRequest:
    """
    A fully validated call, ready to be signed and sent.

    Attributes:
        command (str): Command name in the catalog's casing.
        params (Tuple[Tuple[str, str], ...]): Ordered name/value pairs, values already serialized.
        response_format (ResponseFormat): Format requested from the server.
    """
    command: str
    params: Tuple[Tuple[str, str], ...] = ()
    response_format: ResponseFormat = ResponseFormat.JSON

    def to_dict(self) -> Dict[str, Any]:
        return serialize_to_dict(self)


@dataclass(frozen=True)
class AsyncJob:
    job_id: str
    status: JobStatus = JobStatus.PENDING
    result_code: Optional[str] = None
    error_code: Optional[str] = None
    error_text: Optional[str] = None
    result: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SuccessResult:
    """One field map per returned item."""
    items: Tuple[Dict[str, Any], ...] = ()

    success = True

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def raise_for_error(self) -> "SuccessResult":
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "items": [dict(item) for item in self.items]}


@dataclass(frozen=True)
class ErrorResult:
    """
    Server-side, transport or job failure.

    ``result_code`` is only set for failed async jobs (``jobresultcode``).
    ``transport`` marks results built from an envelope the executor
    synthesized for a network or HTTP failure.
    """
    code: str
    message: str
    result_code: Optional[str] = None
    transport: bool = False

    success = False

    @property
    def is_job_failure(self) -> bool:
        return self.result_code is not None

    def raise_for_error(self):
        """Raise ``TransportError``, ``JobFailedError`` or ``ApiError`` for this result."""
        details = {"errorcode": self.code}
        if self.transport:
            raise TransportError(self.message, error_code=self.code, details=details)
        if self.is_job_failure:
            details["jobresultcode"] = self.result_code
            raise JobFailedError(self.message, error_code=self.code, details=details)
        raise ApiError(self.message, error_code=self.code, details=details)

    def to_dict(self) -> Dict[str, Any]:
        data = {"success": False, "errorcode": self.code, "errortext": self.message}
        if self.result_code is not None:
            data["jobresultcode"] = self.result_code
        if self.transport:
            data["transport"] = True
        return data


@dataclass(frozen=True)
class PendingJobResult:
    """An async job that has not finished yet (NoWait, or the wait budget ran out)."""
    job: AsyncJob
    timed_out: bool = False

    success = True

    @property
    def job_id(self) -> str:
        return self.job.job_id

    def raise_for_error(self) -> "PendingJobResult":
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "jobid": self.job.job_id,
            "jobstatus": self.job.status.value,
            "pending": True,
            "timedout": self.timed_out,
        }


ApiResult = Union[SuccessResult, ErrorResult]
DispatchResult = Union[SuccessResult, ErrorResult, PendingJobResult]
