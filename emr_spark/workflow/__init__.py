"""Command orchestration shared by the CLI and the interactive shell."""

from emr_spark.workflow.commands import (
    EXIT_ABNORMAL_TERMINATION,
    EXIT_AWS_FAILURE,
    EXIT_CANCELLED,
    EXIT_CONFIG_ERROR,
    EXIT_SUCCESS,
    EXIT_TIMEOUT,
    CommandResult,
    run_bind_cluster,
    run_create_cluster,
    run_list_clusters,
    run_monitor,
    run_submit_job,
    run_terminate_cluster,
)

__all__ = [
    "CommandResult",
    "EXIT_ABNORMAL_TERMINATION",
    "EXIT_AWS_FAILURE",
    "EXIT_CANCELLED",
    "EXIT_CONFIG_ERROR",
    "EXIT_SUCCESS",
    "EXIT_TIMEOUT",
    "run_bind_cluster",
    "run_create_cluster",
    "run_list_clusters",
    "run_monitor",
    "run_submit_job",
    "run_terminate_cluster",
]
