"""Deployment pipeline glue for AWS CodePipeline.

Two Lambda entry points live in :mod:`lambdadeploy.handlers`:

- the deployment job orchestrator, which turns a ``CodePipeline.job`` event into
  one backend deployment and reports exactly one result back to the pipeline;
- the notification handler, which turns pipeline state-change events into Slack
  and e-mail notifications.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.2.0"
