"""Create / bind / terminate commands for long-lived clusters."""

from __future__ import annotations

import logging
from typing import Any

from emr_spark.emr.builder import ClusterCreationSpec
from emr_spark.emr.registry import ClusterHandle, list_active_clusters
from emr_spark.errors import NotFoundError

logger = logging.getLogger(__name__)


def create_cluster(emr_client: Any, spec: ClusterCreationSpec) -> str:
    """Issue ``RunJobFlow`` for *spec* and return the new job-flow id."""
    resp = emr_client.run_job_flow(**spec.to_request())
    cluster_id = resp["JobFlowId"]
    logger.info("Created cluster %s (%s)", cluster_id, spec.name)
    return cluster_id


def bind_cluster(emr_client: Any, cluster_id: str) -> ClusterHandle:
    """Return the active cluster *cluster_id* so the caller can bind to it.

    Raises :class:`NotFoundError` if it is not among the active clusters.
    """
    clusters = list_active_clusters(emr_client)
    handle = clusters.get(cluster_id)
    if handle is None:
        raise NotFoundError(f"No active cluster with id {cluster_id}.")
    return handle


def terminate_cluster(emr_client: Any, cluster_id: str) -> None:
    emr_client.terminate_job_flows(JobFlowIds=[cluster_id])
    logger.info("Cluster %s is terminating", cluster_id)
