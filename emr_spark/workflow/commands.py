"""Command orchestration for the CLI and the interactive shell.

Each ``run_*`` function takes the caller's :class:`Session` plus boto3
clients, reports progress through :mod:`emr_spark.ui`, and returns a
:class:`CommandResult` carrying an exit code and the (possibly re-bound)
session.  Fatal conditions map to non-zero exit codes; informational ones
("no active cluster", "nothing bound") print and return ``EXIT_SUCCESS``.
"""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from emr_spark import ui
from emr_spark.aws.s3 import extra_args_decorator, resolve_artifact
from emr_spark.emr.builder import creation_spec_from_settings
from emr_spark.emr.lifecycle import bind_cluster, create_cluster, terminate_cluster
from emr_spark.emr.monitor import MonitorOutcome, monitor_cluster, monitor_named_cluster
from emr_spark.emr.registry import list_active_clusters
from emr_spark.emr.submitter import submit_job
from emr_spark.errors import TRANSPORT_ERRORS, ConfigError, NotFoundError
from emr_spark.session import Session

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_AWS_FAILURE = 2
EXIT_TIMEOUT = 3
EXIT_ABNORMAL_TERMINATION = 4
EXIT_CANCELLED = 5

_MONITOR_EXIT_CODES = {
    MonitorOutcome.SUCCESS: EXIT_SUCCESS,
    MonitorOutcome.TIMEOUT: EXIT_TIMEOUT,
    MonitorOutcome.ABNORMAL_TERMINATION: EXIT_ABNORMAL_TERMINATION,
    MonitorOutcome.CANCELLED: EXIT_CANCELLED,
}


@dataclass
class CommandResult:
    exit_code: int
    session: Session
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_SUCCESS


def guarded(func: Callable[..., CommandResult]) -> Callable[..., CommandResult]:
    """Turn config and AWS errors raised by *func* into exit codes.

    The wrapped function's first argument must be the :class:`Session`.
    """
    @functools.wraps(func)
    def wrapper(session: Session, *args: Any, **kwargs: Any) -> CommandResult:
        try:
            return func(session, *args, **kwargs)
        except ConfigError as exc:
            ui.error_msg(str(exc))
            return CommandResult(EXIT_CONFIG_ERROR, session, str(exc))
        except TRANSPORT_ERRORS as exc:
            logger.debug("AWS call failed", exc_info=True)
            ui.error_msg(f"AWS request failed: {exc}")
            return CommandResult(EXIT_AWS_FAILURE, session, str(exc))

    return wrapper


# ---------------------------------------------------------------------------
# Cluster lifecycle
# ---------------------------------------------------------------------------


@guarded
def run_create_cluster(session: Session, emr_client: Any) -> CommandResult:
    """Create a long-lived cluster and bind the session to it."""
    spec = creation_spec_from_settings(session.settings)
    ui.step(f"Creating cluster {spec.name} ...")
    cluster_id = create_cluster(emr_client, spec)
    ui.ok(
        f"Your new cluster's id is {cluster_id}, "
        "you may check its status on AWS console."
    )
    return CommandResult(EXIT_SUCCESS, session.bind(cluster_id), cluster_id)


@guarded
def run_bind_cluster(
    session: Session, emr_client: Any, cluster_id: str
) -> CommandResult:
    try:
        handle = bind_cluster(emr_client, cluster_id)
    except NotFoundError as exc:
        ui.warn(str(exc))
        return CommandResult(EXIT_SUCCESS, session, str(exc))
    ui.ok(f"Bound to cluster {handle.id} ({handle.name}, {handle.status}).")
    return CommandResult(EXIT_SUCCESS, session.bind(handle.id), handle.id)


@guarded
def run_terminate_cluster(session: Session, emr_client: Any) -> CommandResult:
    """Terminate the bound cluster and clear the binding."""
    cluster_id = session.bound_cluster_id
    if not cluster_id:
        msg = (
            "No cluster is bound; bind the cluster you want to terminate "
            "with bind-cluster (or --cluster-id) first."
        )
        ui.info(msg)
        return CommandResult(EXIT_SUCCESS, session.unbind(), msg)
    terminate_cluster(emr_client, cluster_id)
    ui.ok(
        f"Cluster with id {cluster_id} is terminating, "
        "please check AWS console for further information."
    )
    return CommandResult(EXIT_SUCCESS, session.unbind(), cluster_id)


@guarded
def run_list_clusters(session: Session, emr_client: Any) -> CommandResult:
    clusters = list(list_active_clusters(emr_client).values())
    if not clusters:
        ui.info("No active cluster found.")
        return CommandResult(EXIT_SUCCESS, session, "")
    ui.step(f"{len(clusters)} active clusters found:")
    ui.cluster_table(clusters)
    return CommandResult(EXIT_SUCCESS, session, ",".join(c.id for c in clusters))


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


@guarded
def run_submit_job(
    session: Session,
    emr_client: Any,
    s3_client: Any,
    artifact: str,
    args: Sequence[str] = (),
    *,
    main_class: Optional[str] = None,
) -> CommandResult:
    """Upload *artifact* if needed, then attach or create per cluster name."""
    settings = session.settings
    main = main_class or settings.main_class
    if not main:
        raise ConfigError(
            "Can't locate the main class; pass --main-class or set main_class."
        )

    location = resolve_artifact(
        s3_client,
        artifact,
        settings.s3_jar_folder,
        decorator=extra_args_decorator(settings.put_object_extra_args),
    )
    result = submit_job(
        emr_client,
        settings.cluster_name,
        main,
        list(args),
        settings.submit_confs,
        location,
        creation_spec_from_settings(settings),
    )
    if result.created:
        ui.ok(
            f"Your new cluster's id is {result.cluster_id}, "
            "you may check its status on AWS console."
        )
    else:
        ui.ok(
            f"Your job is added to the cluster with id {result.cluster_id}, "
            "you may check its status on AWS console."
        )
    return CommandResult(EXIT_SUCCESS, session, result.cluster_id)


@guarded
def run_monitor(
    session: Session,
    emr_client: Any,
    *,
    cluster_id: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None,
    **monitor_kwargs: Any,
) -> CommandResult:
    """Monitor a cluster until it finishes or ``timeout_minutes`` elapses.

    Target: *cluster_id* → bound cluster → active cluster named
    ``settings.cluster_name``.
    """
    settings = session.settings
    target = cluster_id or session.bound_cluster_id
    label = target or settings.cluster_name

    def _tick(state: str, elapsed: float) -> None:
        ui.progress_line(f"{label} {state} ({ui.elapsed_str(elapsed)})")

    monitor_kwargs.update(cancel_event=cancel_event, on_tick=_tick)
    if target:
        ui.step(f"Monitoring cluster {target} ...")
        result = monitor_cluster(
            emr_client, target, settings.timeout_seconds, **monitor_kwargs
        )
    else:
        try:
            result = monitor_named_cluster(
                emr_client,
                settings.cluster_name,
                settings.timeout_seconds,
                **monitor_kwargs,
            )
        except NotFoundError as exc:
            ui.info(str(exc))
            return CommandResult(EXIT_SUCCESS, session, str(exc))
    ui.clear_progress()
    target = result.cluster_id

    if result.outcome == MonitorOutcome.SUCCESS:
        ui.ok("Cluster terminated without error.")
    elif result.outcome == MonitorOutcome.CANCELLED:
        ui.warn(f"Stopped monitoring {target}; the cluster was left running.")
    else:
        body: List[str] = [result.error]
        for step_id, state in result.failed_steps.items():
            body.append(f"{step_id}: {state}")
        ui.error_panel(f"Cluster {target}", "\n".join(body))
    return CommandResult(_MONITOR_EXIT_CODES[result.outcome], session, result.error)
