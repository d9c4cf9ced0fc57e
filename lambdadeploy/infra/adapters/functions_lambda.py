from __future__ import annotations

import math
from typing import Any, Dict

from ..contracts import FunctionService
from ..errors import BackendInvocationError, BackendTimeoutError


WAITER_DELAY_SECONDS = 5


class LambdaFunctionService(FunctionService):
    """FunctionService backed by an injected boto3 Lambda client."""

    def __init__(self, client: Any, *, waiter_delay_seconds: int = WAITER_DELAY_SECONDS):
        self.client = client
        self.waiter_delay_seconds = max(1, int(waiter_delay_seconds))

    def describe(self) -> Dict[str, Any]:
        return {"class": self.__class__.__name__, "service": "lambda"}

    def update_code(self, function_name: str, zip_file: bytes) -> Dict[str, Any]:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            return dict(self.client.update_function_code(FunctionName=function_name, ZipFile=zip_file))
        except (ClientError, BotoCoreError) as e:
            raise BackendInvocationError(f"function code update failed: {function_name} ({e})") from e

    def wait_until_updated(self, function_name: str, timeout_seconds: int) -> None:
        from botocore.exceptions import BotoCoreError, ClientError, WaiterError

        delay = self.waiter_delay_seconds
        attempts = max(1, math.ceil(max(1, int(timeout_seconds)) / delay))
        waiter = self.client.get_waiter("function_updated")
        try:
            waiter.wait(FunctionName=function_name, WaiterConfig={"Delay": delay, "MaxAttempts": attempts})
        except WaiterError as e:
            if "Max attempts exceeded" in str(e):
                raise BackendTimeoutError(
                    f"function {function_name} not updated within {timeout_seconds}s"
                ) from e
            raise BackendInvocationError(f"function update did not complete: {function_name} ({e})") from e
        except (ClientError, BotoCoreError) as e:
            raise BackendInvocationError(f"function update status check failed: {function_name} ({e})") from e

    def update_environment(self, function_name: str, variables: Dict[str, str]) -> None:
        """Merge variables into the function's existing environment."""
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            current = self.client.get_function_configuration(FunctionName=function_name)
            merged = dict((current.get("Environment") or {}).get("Variables") or {})
            merged.update({str(k): str(v) for k, v in variables.items()})
            self.client.update_function_configuration(
                FunctionName=function_name,
                Environment={"Variables": merged},
            )
        except (ClientError, BotoCoreError) as e:
            raise BackendInvocationError(f"function configuration update failed: {function_name} ({e})") from e
