"""Polling of asynchronous jobs.

An async command answers with a ``jobid``. The resolver polls
``queryAsyncJobResult`` once per time unit on the calling thread until the job
succeeds, fails, the caller's wait budget runs out, or the caller asked not to
wait at all.
"""

import time
import warnings
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from cloudstack_client.api.normalizer import PayloadParseError, detect_error, normalize_body, parse_payload, unwrap
from cloudstack_client.exceptions import JobTimeoutWarning
from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.helpers.utils import case_insensitive_get
from cloudstack_client.models.base_enum_model import BaseEnumModel
from cloudstack_client.models.command import CommandDescriptor
from cloudstack_client.models.results import (
    ApiRequest,
    AsyncJob,
    DispatchResult,
    ErrorResult,
    JobStatus,
    PendingJobResult,
    SuccessResult,
)

logger = setup_logging(__name__)

QUERY_COMMAND = "queryAsyncJobResult"


class JobState(BaseEnumModel):
    """States of one resolver run."""
    STARTED = "started"
    POLLING = "polling"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None or value == "" else str(value)


def parse_job(body: Dict[str, Any], job_id: str) -> AsyncJob:
    """
    Build an ``AsyncJob`` snapshot from a queryAsyncJobResult body.

    :param body: The unwrapped response body.
    :param job_id: Job id the poll was issued for, used when the body omits it.
    """
    raw_status = case_insensitive_get(body, "jobstatus", 0)
    try:
        status = JobStatus.from_dict(raw_status)
    except ValueError:
        logger.warning("Unknown job status, treating as pending", jobid=job_id, jobstatus=raw_status)
        status = JobStatus.PENDING

    result = case_insensitive_get(body, "jobresult")
    if not isinstance(result, dict):
        result = {}

    return AsyncJob(
        job_id=str(case_insensitive_get(body, "jobid") or job_id),
        status=status,
        result_code=_optional_str(case_insensitive_get(body, "jobresultcode")),
        error_code=_optional_str(result.get("errorcode")),
        error_text=_optional_str(result.get("errortext")),
        result=result,
    )


class AsyncJobResolver:
    """
    Drives ``Started -> Polling -> {Succeeded, Failed, TimedOut}`` for one dispatch.

    ``wait`` is the budget in time units (``None`` waits forever); ``no_wait``
    returns after the first poll if the job is still pending.
    """

    def __init__(
        self,
        executor,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.executor = executor
        self.sleep = sleep
        if poll_interval is None:
            poll_interval = float(executor.settings.get("POLL_INTERVAL", 1.0))
        self.poll_interval = poll_interval
        self.state = JobState.STARTED
        self.polls = 0

    def _fetch(self, request: ApiRequest):
        """Execute and parse; returns ``(body, error)``."""
        raw, synthesized = self.executor.send(request)
        try:
            payload = parse_payload(raw, request.response_format)
        except PayloadParseError as e:
            return None, ErrorResult(code="1", message=str(e))
        _, body = unwrap(payload)
        error = detect_error(body)
        if error is not None and synthesized:
            error = replace(error, transport=True)
        return body, error

    def poll(self, job_id: str, request: ApiRequest):
        """Issue one queryAsyncJobResult call; returns ``(AsyncJob, error)``."""
        self.polls += 1
        query = ApiRequest(
            command=QUERY_COMMAND,
            params=(("jobid", job_id),),
            response_format=request.response_format,
        )
        body, error = self._fetch(query)
        if error is not None:
            return None, error
        return parse_job(body, job_id), None

    def resolve(
        self,
        request: ApiRequest,
        descriptor: CommandDescriptor,
        wait: Optional[int] = None,
        no_wait: bool = False,
    ) -> DispatchResult:
        """
        Submit ``request`` and follow its job to completion.

        :param request: The validated async command.
        :param descriptor: Its descriptor, used to normalize the job result.
        :param wait: Wait budget in time units; ``None`` for unbounded.
        :param no_wait: Return a pending result after the first poll.
        :return: ``SuccessResult``, ``ErrorResult`` or ``PendingJobResult``.
        """
        self.state = JobState.STARTED
        self.polls = 0

        body, error = self._fetch(request)
        if error is not None:
            self.state = JobState.FAILED
            return error

        job_id = case_insensitive_get(body, "jobid")
        if not job_id:
            # Some async commands complete inline and return the object directly.
            self.state = JobState.SUCCEEDED
            return normalize_body(body, descriptor)
        job_id = str(job_id)

        logger.info("Async job submitted", command=request.command, jobid=job_id)
        self.state = JobState.POLLING
        remaining = wait

        while True:
            job, error = self.poll(job_id, request)
            if error is not None:
                self.state = JobState.FAILED
                return error

            if job.status is JobStatus.SUCCEEDED:
                self.state = JobState.SUCCEEDED
                logger.info("Async job succeeded", command=request.command, jobid=job_id, polls=self.polls)
                if not job.result:
                    return SuccessResult(items=())
                return normalize_body(job.result, descriptor)

            if job.status is JobStatus.FAILED:
                self.state = JobState.FAILED
                logger.info("Async job failed", command=request.command, jobid=job_id, errorcode=job.error_code)
                return ErrorResult(
                    code=job.error_code or "1",
                    message=job.error_text or "",
                    result_code=job.result_code or "",
                )

            if no_wait:
                self.state = JobState.PENDING
                return PendingJobResult(job=job)

            if remaining is not None and remaining <= 0:
                self.state = JobState.TIMED_OUT
                message = f"Timed out waiting for job {job_id} ({request.command}); it is still pending"
                logger.warning("Async job wait budget exhausted", command=request.command, jobid=job_id)
                warnings.warn(message, JobTimeoutWarning, stacklevel=2)
                return PendingJobResult(job=job, timed_out=True)

            self.sleep(self.poll_interval)
            if remaining is not None:
                remaining -= 1
