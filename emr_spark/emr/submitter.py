"""Spark job submission: attach to a named cluster or create an ephemeral one."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional

from emr_spark.emr.builder import (
    ClusterCreationSpec,
    StepSpec,
    build_spark_step,
    with_appended_step,
    with_keep_alive,
)
from emr_spark.emr.registry import find_cluster_by_name

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    """Outcome of :func:`submit_job`."""

    cluster_id: str
    created: bool
    step: StepSpec
    step_ids: tuple = ()


def ephemeral_creation_spec(
    template: ClusterCreationSpec,
    cluster_name: str,
    step: StepSpec,
) -> ClusterCreationSpec:
    """Return *template* turned into a job-scoped cluster running *step*.

    Keep-alive is forced off so EMR tears the cluster down once every step
    has finished, whether or not they succeeded.
    """
    spec = with_appended_step(template, step)
    return replace(
        spec,
        name=cluster_name,
        instances=with_keep_alive(spec.instances, False),
    )


def submit_job(
    emr_client: Any,
    cluster_name: str,
    main_class: str,
    args: Iterable[str],
    submit_confs: Optional[Mapping[str, str]],
    artifact_location: str,
    creation_spec: ClusterCreationSpec,
) -> SubmitResult:
    """Submit a Spark step to the active cluster named *cluster_name*.

    Exactly one mutating call is made: ``AddJobFlowSteps`` when an active
    cluster with that name exists, ``RunJobFlow`` otherwise.  The existing
    cluster's keep-alive setting is never touched.
    """
    cluster = find_cluster_by_name(emr_client, cluster_name)
    step = build_spark_step(main_class, artifact_location, args, submit_confs)

    if cluster is not None:
        resp = emr_client.add_job_flow_steps(
            JobFlowId=cluster.id,
            Steps=[step.to_request()],
        )
        logger.info("Added step to cluster %s (%s)", cluster.id, cluster.name)
        return SubmitResult(
            cluster_id=cluster.id,
            created=False,
            step=step,
            step_ids=tuple(resp.get("StepIds", [])),
        )

    spec = ephemeral_creation_spec(creation_spec, cluster_name, step)
    resp = emr_client.run_job_flow(**spec.to_request())
    cluster_id = resp["JobFlowId"]
    logger.info(
        "No active cluster named %r; created ephemeral cluster %s",
        cluster_name,
        cluster_id,
    )
    return SubmitResult(cluster_id=cluster_id, created=True, step=step)
