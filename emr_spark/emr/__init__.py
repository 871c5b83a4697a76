"""EMR request building, cluster queries, job submission and monitoring."""

from emr_spark.emr.builder import (
    ACTION_ON_FAILURE_CONTINUE,
    MARKET_ON_DEMAND,
    MARKET_SPOT,
    ROLE_CORE,
    ROLE_MASTER,
    ClusterCreationSpec,
    InstanceGroupSpec,
    InstancesConfig,
    StepSpec,
    build_creation_request,
    build_instance_groups,
    build_instances_config,
    build_spark_step,
    build_spark_submit_args,
    creation_spec_from_settings,
)
from emr_spark.emr.lifecycle import bind_cluster, create_cluster, terminate_cluster
from emr_spark.emr.monitor import (
    DEFAULT_POLL_INTERVAL,
    MonitorOutcome,
    MonitorResult,
    MonitorState,
    monitor_cluster,
    monitor_named_cluster,
)
from emr_spark.emr.registry import (
    ACTIVATED_STATES,
    ClusterHandle,
    find_cluster_by_name,
    list_active_clusters,
)
from emr_spark.emr.submitter import SubmitResult, submit_job

__all__ = [
    "ACTION_ON_FAILURE_CONTINUE",
    "ACTIVATED_STATES",
    "ClusterCreationSpec",
    "ClusterHandle",
    "DEFAULT_POLL_INTERVAL",
    "InstanceGroupSpec",
    "InstancesConfig",
    "MARKET_ON_DEMAND",
    "MARKET_SPOT",
    "MonitorOutcome",
    "MonitorResult",
    "MonitorState",
    "ROLE_CORE",
    "ROLE_MASTER",
    "StepSpec",
    "SubmitResult",
    "bind_cluster",
    "build_creation_request",
    "build_instance_groups",
    "build_instances_config",
    "build_spark_step",
    "build_spark_submit_args",
    "create_cluster",
    "creation_spec_from_settings",
    "find_cluster_by_name",
    "list_active_clusters",
    "monitor_cluster",
    "monitor_named_cluster",
    "submit_job",
]
