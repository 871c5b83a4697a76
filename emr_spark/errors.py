"""Exception hierarchy for emr-spark.

Transport failures from botocore are never wrapped; they propagate as-is and
are only caught at the CLI boundary via :data:`TRANSPORT_ERRORS`.
"""

from __future__ import annotations

from typing import Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

#: botocore failures that surface unchanged from every EMR / S3 call.
TRANSPORT_ERRORS = (BotoCoreError, ClientError)


class EmrSparkError(Exception):
    """Base class for all emr-spark errors."""


class ConfigError(EmrSparkError, ValueError):
    """Invalid or contradictory settings.  Never retryable."""


class NotFoundError(EmrSparkError, LookupError):
    """No active cluster matches the requested name or id."""


class MonitorTimeoutError(EmrSparkError, TimeoutError):
    """The monitor deadline passed while the cluster was still active.

    The cluster has already been asked to terminate when this is raised.
    """

    def __init__(self, cluster_id: str, message: str = "") -> None:
        self.cluster_id = cluster_id
        super().__init__(message or f"Timeout. Cluster {cluster_id} terminated.")


class AbnormalTerminationError(EmrSparkError):
    """The cluster finished on its own but not every step completed."""

    def __init__(
        self,
        cluster_id: str,
        failed_steps: Optional[Dict[str, str]] = None,
    ) -> None:
        self.cluster_id = cluster_id
        self.failed_steps = dict(failed_steps or {})
        detail = ", ".join(f"{k}={v}" for k, v in self.failed_steps.items())
        msg = f"Cluster {cluster_id} terminated with abnormal step."
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class MonitorCancelledError(EmrSparkError):
    """Monitoring was cancelled by the caller before a terminal state."""

    def __init__(self, cluster_id: str) -> None:
        self.cluster_id = cluster_id
        super().__init__(f"Monitoring of cluster {cluster_id} was cancelled.")
