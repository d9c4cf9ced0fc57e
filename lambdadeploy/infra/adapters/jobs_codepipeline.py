from __future__ import annotations

from typing import Any, Dict

from ..contracts import JobSignaler, PipelineReader
from ..errors import NotificationError, ReportingError


class CodePipelineJobs(JobSignaler, PipelineReader):
    """Job signalling and execution lookups against an injected boto3 CodePipeline client."""

    def __init__(self, client: Any):
        self.client = client

    def describe(self) -> Dict[str, Any]:
        return {"class": self.__class__.__name__, "service": "codepipeline"}

    def put_job_success(self, job_id: str, output_variables: Dict[str, str]) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        kwargs: Dict[str, Any] = {"jobId": job_id}
        if output_variables:
            kwargs["outputVariables"] = {str(k): str(v) for k, v in output_variables.items()}
        try:
            self.client.put_job_success_result(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise ReportingError(f"put_job_success_result failed for job {job_id} ({e})") from e

    def put_job_failure(self, job_id: str, message: str, failure_type: str = "JobFailed") -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self.client.put_job_failure_result(
                jobId=job_id,
                failureDetails={"type": failure_type, "message": message},
            )
        except (ClientError, BotoCoreError) as e:
            raise ReportingError(f"put_job_failure_result failed for job {job_id} ({e})") from e

    def get_pipeline_execution(self, pipeline_name: str, execution_id: str) -> Dict[str, Any]:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            resp = self.client.get_pipeline_execution(
                pipelineName=pipeline_name,
                pipelineExecutionId=execution_id,
            )
        except (ClientError, BotoCoreError) as e:
            raise NotificationError(
                f"get_pipeline_execution failed: pipeline={pipeline_name} execution={execution_id} ({e})"
            ) from e
        return dict(resp.get("pipelineExecution") or {})
