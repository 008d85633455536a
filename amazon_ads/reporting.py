"""Asynchronous report workflow: submit a job, poll it to a terminal state, download rows.

State machine::

    SUBMITTED -> IN_PROGRESS -> SUCCESS  -> download
                             -> FAILURE  -> ReportFailedError
                             -> TIMEOUT  -> ReportTimeoutError (local, budget exhausted)

The submission POST is issued exactly once. Status polls and the download
are idempotent GETs and go through the retry executor.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from amazon_ads import config
from amazon_ads.client import AmazonAdsClient, RequestScope
from amazon_ads.errors import ReportFailedError, ReportTimeoutError, UpstreamContractError
from amazon_ads.metrics import EntityLevel, ReportRow
from amazon_ads.retry import DEFAULT_POLICY, RetryPolicy, call_with_retries

logger = logging.getLogger(__name__)

DEFAULT_METRICS = [
    "impressions",
    "clicks",
    "cost",
    "attributedSales14d",
    "attributedConversions14d",
]


class JobStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    TIMEOUT = "TIMEOUT"


@dataclass
class ReportRequest:
    report_type: str
    campaign_type: str
    start_date: str
    end_date: str
    metrics: Optional[List[str]] = None
    time_unit: Optional[str] = None
    filters: Optional[Dict[str, Any]] = None


@dataclass
class ReportJob:
    report_id: str
    status: JobStatus = JobStatus.SUBMITTED
    location: Optional[str] = None
    file_size: Optional[int] = None
    expires_at: Optional[int] = None
    status_details: Optional[str] = None
    polls: int = 0

    def apply(self, payload: Dict[str, Any]) -> None:
        """Fold a status response into the job. Unknown statuses count as in progress."""
        try:
            self.status = JobStatus(str(payload.get("status", "")).upper())
        except ValueError:
            self.status = JobStatus.IN_PROGRESS
        if self.status in (JobStatus.SUBMITTED, JobStatus.TIMEOUT):
            # only the server's three states are meaningful in a payload
            self.status = JobStatus.IN_PROGRESS
        self.location = payload.get("location") or self.location
        self.file_size = payload.get("fileSize", self.file_size)
        self.expires_at = payload.get("expiresAt", self.expires_at)
        self.status_details = payload.get("statusDetails", self.status_details)


@dataclass(frozen=True)
class PollSettings:
    max_attempts: int = config.REPORT_MAX_POLL_ATTEMPTS
    interval: float = config.REPORT_POLL_INTERVAL


@dataclass
class ReportResult:
    job: ReportJob
    rows: List[ReportRow] = field(default_factory=list)


def build_report_endpoint(campaign_type: str, report_type: str) -> str:
    return f"/v2/{campaign_type}/{report_type}/report"


def build_report_body(request: ReportRequest) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "reportDate": request.start_date,
        "metrics": ",".join(request.metrics or DEFAULT_METRICS),
    }
    if request.time_unit:
        body["timeUnit"] = request.time_unit

    filters = request.filters or {}
    if filters.get("state"):
        body["segment"] = filters["state"]
    campaign_ids = filters.get("campaign_id") or []
    if campaign_ids:
        if isinstance(campaign_ids, (list, tuple)):
            campaign_ids = ",".join(str(c) for c in campaign_ids)
        body["campaignIdFilter"] = campaign_ids
    return body


def submit_report(client: AmazonAdsClient, request: ReportRequest, scope: RequestScope) -> ReportJob:
    """POST the report request. Never retried here: a lost response would duplicate the job."""
    endpoint = build_report_endpoint(request.campaign_type, request.report_type)
    response = client.post(endpoint, build_report_body(request), scope=scope)
    report_id = response.get("reportId") if isinstance(response, dict) else None
    if not report_id:
        raise UpstreamContractError("Report submission returned no reportId")
    logger.info("Submitted %s/%s report %s", request.campaign_type, request.report_type, report_id)
    return ReportJob(report_id=str(report_id))


def poll_report(
    client: AmazonAdsClient,
    job: ReportJob,
    scope: RequestScope,
    settings: PollSettings = PollSettings(),
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Optional[Callable[[float], None]] = None,
) -> ReportJob:
    """Poll until SUCCESS, raising on FAILURE or when the attempt budget runs out."""
    sleep = sleep or time.sleep
    path = f"/v2/reports/{job.report_id}"

    while job.polls < settings.max_attempts:
        payload = call_with_retries(lambda: client.get(path, scope=scope), policy, sleep=sleep)
        job.polls += 1
        job.apply(payload if isinstance(payload, dict) else {})

        if job.status is JobStatus.SUCCESS:
            logger.info("Report %s ready after %d poll(s)", job.report_id, job.polls)
            return job
        if job.status is JobStatus.FAILURE:
            logger.error("Report %s failed: %s", job.report_id, job.status_details)
            raise ReportFailedError(job.report_id, job.status_details)

        logger.debug("Report %s in progress (%d/%d)", job.report_id, job.polls, settings.max_attempts)
        if job.polls < settings.max_attempts:
            sleep(settings.interval)

    job.status = JobStatus.TIMEOUT
    logger.warning("Report %s still in progress after %d polls", job.report_id, job.polls)
    raise ReportTimeoutError(job.report_id, job.polls)


def download_report(
    client: AmazonAdsClient,
    location: str,
    scope: RequestScope,
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Optional[Callable[[float], None]] = None,
) -> List[Dict[str, Any]]:
    data = call_with_retries(lambda: client.download(location, scope=scope), policy, sleep=sleep)
    if isinstance(data, list):
        return data
    return [data]


def generate_report(
    client: AmazonAdsClient,
    request: ReportRequest,
    scope: RequestScope,
    settings: PollSettings = PollSettings(),
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Optional[Callable[[float], None]] = None,
) -> ReportResult:
    """Run the whole workflow for one request and return the tagged raw rows."""
    scope.require("reports API")

    job = submit_report(client, request, scope)
    poll_report(client, job, scope, settings, policy, sleep)
    if not job.location:
        raise UpstreamContractError("Report completed but no download URL provided")

    records = download_report(client, job.location, scope, policy, sleep)
    level = EntityLevel.from_report_type(request.report_type)
    rows = [ReportRow(level, record) for record in records if isinstance(record, dict)]
    logger.info("Report %s downloaded with %d rows", job.report_id, len(rows))
    return ReportResult(job=job, rows=rows)
