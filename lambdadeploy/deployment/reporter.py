from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Callable, Dict, Sequence, Set

from ..infra.contracts import JobSignaler, ObjectStore
from ..infra.errors import OutputArtifactWriteError, ReportingError
from ..infra.models import DeploymentResult, OutputArtifactRef
from ..utils.time import iso, utcnow


logger = logging.getLogger(__name__)


FAILURE_TYPE = "JobFailed"

# CodePipeline rejects failure messages longer than this.
MAX_FAILURE_MESSAGE_CHARS = 5000


def build_summary(result: DeploymentResult, timestamp: str) -> Dict[str, object]:
    return {
        "deploymentResult": result.to_dict(),
        "timestamp": timestamp,
        "status": "SUCCESS",
    }


def truncate_message(message: str, limit: int = MAX_FAILURE_MESSAGE_CHARS) -> str:
    msg = str(message or "").strip() or "deployment failed"
    if len(msg) <= limit:
        return msg
    return msg[: limit - 3] + "..."


class JobResultReporter:
    """Signal the terminal result of a job back to the pipeline.

    Each job id may be reported once per reporter; a second attempt raises
    ReportingError without touching the signaler.
    """

    def __init__(self, signaler: JobSignaler, store: ObjectStore, *, clock: Callable[[], datetime] = utcnow):
        self.signaler = signaler
        self.store = store
        self.clock = clock
        self._reported: Set[str] = set()

    def has_reported(self, job_id: str) -> bool:
        return job_id in self._reported

    def write_summaries(self, outputs: Sequence[OutputArtifactRef], result: DeploymentResult) -> None:
        """Write the deployment summary JSON to every declared output artifact.

        Runs before the success signal; a failed write means the job failed.
        """
        if not outputs:
            return
        body = json.dumps(build_summary(result, iso(self.clock())), indent=2).encode("utf-8")
        for out in outputs:
            try:
                self.store.put_object(out.location, body, content_type="application/json")
            except Exception as e:
                raise OutputArtifactWriteError(
                    f"output artifact {out.name!r} write failed: {out.location.uri} ({e})"
                ) from e
            logger.info("[report] output artifact written name=%s uri=%s", out.name, out.location.uri)

    def _claim(self, job_id: str) -> None:
        if job_id in self._reported:
            raise ReportingError(f"job {job_id} was already reported")
        self._reported.add(job_id)

    def report_success(self, job_id: str, output_variables: Dict[str, str]) -> None:
        self._claim(job_id)
        try:
            self.signaler.put_job_success(job_id, dict(output_variables))
        except ReportingError:
            raise
        except Exception as e:
            raise ReportingError(f"success report failed for job {job_id} ({e})") from e
        logger.info("[report] job=%s SUCCESS", job_id)

    def report_failure(self, job_id: str, message: str) -> None:
        self._claim(job_id)
        msg = truncate_message(message)
        try:
            self.signaler.put_job_failure(job_id, msg, FAILURE_TYPE)
        except ReportingError:
            raise
        except Exception as e:
            raise ReportingError(f"failure report failed for job {job_id} ({e})") from e
        logger.info("[report] job=%s FAILED message=%s", job_id, msg)
