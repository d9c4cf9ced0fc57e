from __future__ import annotations

from .containers_ecs import EcsContainerService
from .functions_lambda import LambdaFunctionService
from .jobs_codepipeline import CodePipelineJobs
from .mail_ses import SesMailSender
from .object_store_s3 import S3ObjectStore

__all__ = [
    "EcsContainerService",
    "LambdaFunctionService",
    "CodePipelineJobs",
    "SesMailSender",
    "S3ObjectStore",
]
