from __future__ import annotations

from typing import Any, Dict, List, Mapping

import jsonschema

from ..infra.errors import InvalidJobEventError
from ..infra.models import ArtifactLocation, InputArtifactRef, Job, OutputArtifactRef


JOB_KEY = "CodePipeline.job"


def _artifact_schema() -> Dict[str, Any]:
    # Both the CodePipeline shape ({"s3Location": {"bucketName", "objectKey"}})
    # and the flattened {"bucket", "key"} shape are accepted.
    s3_location = {
        "type": "object",
        "required": ["s3Location"],
        "properties": {
            "type": {"type": "string"},
            "s3Location": {
                "type": "object",
                "required": ["bucketName", "objectKey"],
                "properties": {
                    "bucketName": {"type": "string", "minLength": 1},
                    "objectKey": {"type": "string", "minLength": 1},
                },
            },
        },
    }
    flat_location = {
        "type": "object",
        "required": ["bucket", "key"],
        "properties": {
            "bucket": {"type": "string", "minLength": 1},
            "key": {"type": "string", "minLength": 1},
        },
    }
    return {
        "type": "object",
        "required": ["name", "location"],
        "properties": {
            "name": {"type": "string", "minLength": 1},
            "revision": {"type": ["string", "null"]},
            "location": {"anyOf": [s3_location, flat_location]},
        },
    }


def job_event_schema() -> Dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": [JOB_KEY],
        "properties": {
            JOB_KEY: {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "accountId": {"type": "string"},
                    "data": {
                        "type": "object",
                        "properties": {
                            "inputArtifacts": {"type": "array", "items": _artifact_schema()},
                            "outputArtifacts": {"type": "array", "items": _artifact_schema()},
                            "actionConfiguration": {
                                "type": "object",
                                "properties": {
                                    "configuration": {
                                        "type": "object",
                                        "additionalProperties": {"type": ["string", "number", "boolean", "null"]},
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
    }


def extract_job_id(event: Any) -> str:
    """Return the job id, or raise InvalidJobEventError when there is none to report against."""
    if not isinstance(event, Mapping):
        raise InvalidJobEventError(f"job event must be an object, got {type(event).__name__}")
    job = event.get(JOB_KEY)
    if not isinstance(job, Mapping):
        raise InvalidJobEventError(f"event has no {JOB_KEY!r} object")
    job_id = str(job.get("id") or "").strip()
    if not job_id:
        raise InvalidJobEventError(f"event {JOB_KEY!r} has no id")
    return job_id


def _location(raw: Mapping[str, Any]) -> ArtifactLocation:
    s3 = raw.get("s3Location")
    if isinstance(s3, Mapping):
        return ArtifactLocation(bucket=str(s3.get("bucketName", "")), key=str(s3.get("objectKey", "")))
    return ArtifactLocation(bucket=str(raw.get("bucket", "")), key=str(raw.get("key", "")))


def parse_job_event(event: Any) -> Job:
    """Validate a ``CodePipeline.job`` event and convert it into a Job."""
    job_id = extract_job_id(event)
    try:
        jsonschema.validate(instance=event, schema=job_event_schema())
    except jsonschema.ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path)
        raise InvalidJobEventError(f"job event schema validation failed at {path or '<root>'}: {e.message}") from e

    data = event[JOB_KEY].get("data") or {}

    inputs: List[InputArtifactRef] = [
        InputArtifactRef(name=str(a["name"]), location=_location(a["location"]))
        for a in data.get("inputArtifacts") or []
    ]
    outputs: List[OutputArtifactRef] = [
        OutputArtifactRef(name=str(a["name"]), location=_location(a["location"]))
        for a in data.get("outputArtifacts") or []
    ]
    configuration = (data.get("actionConfiguration") or {}).get("configuration") or {}

    return Job(
        job_id=job_id,
        input_artifacts=inputs,
        output_artifacts=outputs,
        action_configuration={str(k): "" if v is None else str(v) for k, v in configuration.items()},
    )


def _loggable_refs(items: Any) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    if not isinstance(items, list):
        return out
    for a in items:
        if isinstance(a, Mapping) and isinstance(a.get("location"), Mapping):
            out.append({"name": str(a.get("name", "")), "uri": _location(a["location"]).uri})
    return out


def summarize_job_event(event: Any) -> Dict[str, Any]:
    """Loggable view of a job event: job id plus artifact names and locations.

    ``artifactCredentials`` and action configuration values are left out. Never
    raises, so it is safe to call on malformed events.
    """
    job = event.get(JOB_KEY) if isinstance(event, Mapping) else None
    if not isinstance(job, Mapping):
        return {"jobId": None}
    data = job.get("data")
    if not isinstance(data, Mapping):
        data = {}
    return {
        "jobId": job.get("id"),
        "inputArtifacts": _loggable_refs(data.get("inputArtifacts")),
        "outputArtifacts": _loggable_refs(data.get("outputArtifacts")),
    }
