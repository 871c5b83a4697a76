"""Cluster monitor — poll until the cluster finishes or the timeout fires.

Normal completion is detected by EMR's own auto-termination; the timeout is
only a safety net.  A cluster that has already left the activated states is
never terminated by this loop.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from emr_spark.emr.registry import ACTIVATED_STATES, find_cluster_by_name
from emr_spark.errors import (
    AbnormalTerminationError,
    MonitorCancelledError,
    MonitorTimeoutError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Default seconds between status polls.
DEFAULT_POLL_INTERVAL: float = 5.0

#: Step state that counts as success.
STEP_COMPLETED: str = "COMPLETED"


class MonitorState(str, enum.Enum):
    """Where the monitor loop is in its lifecycle."""

    ACTIVE = "ACTIVE"
    TIMED_OUT_ACTIVE = "TIMED_OUT_ACTIVE"
    TERMINATED_NORMAL = "TERMINATED_NORMAL"
    TERMINATED_ABNORMAL = "TERMINATED_ABNORMAL"
    CANCELLED = "CANCELLED"


class MonitorOutcome(str, enum.Enum):
    SUCCESS = "SUCCESS"
    TIMEOUT = "TIMEOUT"
    ABNORMAL_TERMINATION = "ABNORMAL_TERMINATION"
    CANCELLED = "CANCELLED"


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class MonitorResult:
    """Outcome of :func:`monitor_cluster`."""

    cluster_id: str
    outcome: MonitorOutcome
    final_status: Optional[str]
    elapsed_seconds: float
    polls: int = 0
    state: MonitorState = MonitorState.ACTIVE
    terminated: bool = False
    failed_steps: Dict[str, str] = field(default_factory=dict)
    error: str = ""

    @property
    def success(self) -> bool:
        return self.outcome == MonitorOutcome.SUCCESS

    def raise_for_outcome(self) -> None:
        """Raise the matching :mod:`emr_spark.errors` exception unless successful."""
        if self.outcome == MonitorOutcome.TIMEOUT:
            raise MonitorTimeoutError(self.cluster_id)
        if self.outcome == MonitorOutcome.ABNORMAL_TERMINATION:
            raise AbnormalTerminationError(self.cluster_id, self.failed_steps)
        if self.outcome == MonitorOutcome.CANCELLED:
            raise MonitorCancelledError(self.cluster_id)


# ---------------------------------------------------------------------------
# Status lookup
# ---------------------------------------------------------------------------


def get_cluster_state(emr_client: Any, cluster_id: str) -> str:
    """Return the current ``Status.State`` of *cluster_id*."""
    resp = emr_client.describe_cluster(ClusterId=cluster_id)
    return resp["Cluster"]["Status"]["State"]


def list_step_states(emr_client: Any, cluster_id: str) -> Dict[str, str]:
    """Return ``{step_label: state}`` for every step of *cluster_id*.

    The label is the step ``Id``; steps listed without one are labelled
    ``<Name>#<position>`` so same-named steps never collapse into one entry.
    """
    states: Dict[str, str] = {}
    paginator = emr_client.get_paginator("list_steps")
    position = 0
    for page in paginator.paginate(ClusterId=cluster_id):
        for s in page.get("Steps", []):
            label = s.get("Id") or f"{s.get('Name') or 'step'}#{position}"
            states[label] = s.get("Status", {}).get("State", "")
            position += 1
    return states


# ---------------------------------------------------------------------------
# Poll loop
# ---------------------------------------------------------------------------


def monitor_cluster(
    emr_client: Any,
    cluster_id: str,
    timeout_seconds: float,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel_event: Optional[threading.Event] = None,
    on_tick: Optional[Callable[[str, float], None]] = None,
    _sleep_fn: Any = None,
    _clock_fn: Any = None,
) -> MonitorResult:
    """Block until *cluster_id* leaves the activated states or times out.

    Per tick:

    * deadline reached and cluster still active → terminate it once and
      report ``TIMEOUT``;
    * cluster no longer active → inspect its steps; any step not
      ``COMPLETED`` → ``ABNORMAL_TERMINATION``, otherwise ``SUCCESS``;
    * *cancel_event* set → ``CANCELLED`` (the cluster is left alone);
    * otherwise sleep *poll_interval* and poll again.

    *on_tick* receives ``(state, elapsed_seconds)`` after each poll.
    The *_sleep_fn* / *_clock_fn* parameters are for test injection.
    """
    clock = _clock_fn or time.monotonic
    if _sleep_fn is not None:
        sleep = _sleep_fn
    elif cancel_event is not None:
        sleep = cancel_event.wait
    else:
        sleep = time.sleep

    start = clock()
    deadline = start + timeout_seconds
    polls = 0
    monitor_state = MonitorState.ACTIVE

    logger.info(
        "Monitoring cluster %s (timeout %.0fs, poll every %.0fs)",
        cluster_id,
        timeout_seconds,
        poll_interval,
    )

    while True:
        status = get_cluster_state(emr_client, cluster_id)
        polls += 1
        now = clock()
        if on_tick is not None:
            on_tick(status, now - start)

        active = status in ACTIVATED_STATES

        if now >= deadline and active:
            monitor_state = MonitorState.TIMED_OUT_ACTIVE
            logger.warning(
                "Cluster %s still %s after %.0fs; terminating",
                cluster_id,
                status,
                now - start,
            )
            emr_client.terminate_job_flows(JobFlowIds=[cluster_id])
            return MonitorResult(
                cluster_id=cluster_id,
                outcome=MonitorOutcome.TIMEOUT,
                final_status=status,
                elapsed_seconds=now - start,
                polls=polls,
                state=monitor_state,
                terminated=True,
                error="Timeout. Cluster terminated.",
            )

        if not active:
            step_states = list_step_states(emr_client, cluster_id)
            failed = {
                sid: st for sid, st in step_states.items() if st != STEP_COMPLETED
            }
            if failed:
                monitor_state = MonitorState.TERMINATED_ABNORMAL
                logger.error(
                    "Cluster %s ended in %s with abnormal steps: %s",
                    cluster_id,
                    status,
                    failed,
                )
                return MonitorResult(
                    cluster_id=cluster_id,
                    outcome=MonitorOutcome.ABNORMAL_TERMINATION,
                    final_status=status,
                    elapsed_seconds=now - start,
                    polls=polls,
                    state=monitor_state,
                    failed_steps=failed,
                    error="Cluster terminated with abnormal step.",
                )
            monitor_state = MonitorState.TERMINATED_NORMAL
            logger.info("Cluster %s terminated without error.", cluster_id)
            return MonitorResult(
                cluster_id=cluster_id,
                outcome=MonitorOutcome.SUCCESS,
                final_status=status,
                elapsed_seconds=now - start,
                polls=polls,
                state=monitor_state,
            )

        if cancel_event is not None and cancel_event.is_set():
            monitor_state = MonitorState.CANCELLED
            logger.info("Monitoring of cluster %s cancelled", cluster_id)
            return MonitorResult(
                cluster_id=cluster_id,
                outcome=MonitorOutcome.CANCELLED,
                final_status=status,
                elapsed_seconds=now - start,
                polls=polls,
                state=monitor_state,
                error="Monitoring cancelled.",
            )

        logger.debug(
            "Cluster %s is %s (%s, %.0fs elapsed)",
            cluster_id,
            status,
            monitor_state.value,
            now - start,
        )
        sleep(poll_interval)


def monitor_named_cluster(
    emr_client: Any,
    cluster_name: str,
    timeout_seconds: float,
    **kwargs: Any,
) -> MonitorResult:
    """Resolve the active cluster named *cluster_name* and monitor it.

    Raises :class:`NotFoundError` if no active cluster has that name.
    """
    cluster = find_cluster_by_name(emr_client, cluster_name)
    if cluster is None:
        raise NotFoundError(f"The cluster with name {cluster_name} does not exist.")
    logger.info("Found cluster %s, start monitoring.", cluster.id)
    return monitor_cluster(emr_client, cluster.id, timeout_seconds, **kwargs)
