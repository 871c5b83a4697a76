"""EMR request builders — settings in, ``RunJobFlow`` structures out.

Every object here is a frozen dataclass assembled by a small pure function;
``to_request()`` renders the boto3 keyword structure.  Optional fields are
left out of the request entirely when unset so EMR applies its own defaults
instead of receiving empty values.

No I/O happens in this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from emr_spark.config.models import EmrConfiguration, Settings
from emr_spark.errors import ConfigError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ROLE_MASTER = "MASTER"
ROLE_CORE = "CORE"

MARKET_ON_DEMAND = "ON_DEMAND"
MARKET_SPOT = "SPOT"

#: Step policy: a failed step leaves the cluster (and sibling steps) running.
ACTION_ON_FAILURE_CONTINUE = "CONTINUE"

COMMAND_RUNNER_JAR = "command-runner.jar"
DEFAULT_STEP_NAME = "Spark Step"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InstanceGroupSpec:
    """One ``InstanceGroups`` entry."""

    role: str
    instance_type: str
    instance_count: int
    market: str = MARKET_ON_DEMAND
    bid_price: Optional[str] = None

    def to_request(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "InstanceRole": self.role,
            "Market": self.market,
            "InstanceType": self.instance_type,
            "InstanceCount": self.instance_count,
        }
        if self.bid_price is not None:
            out["BidPrice"] = self.bid_price
        return out


@dataclass(frozen=True)
class InstancesConfig:
    """The ``Instances`` block of a ``RunJobFlow`` request."""

    instance_groups: Tuple[InstanceGroupSpec, ...]
    subnet_id: Optional[str] = None
    key_name: Optional[str] = None
    security_group_ids: Tuple[str, ...] = ()
    keep_alive_when_no_steps: bool = True

    def to_request(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.subnet_id:
            out["Ec2SubnetId"] = self.subnet_id
        if self.key_name:
            out["Ec2KeyName"] = self.key_name
        if self.security_group_ids:
            out["AdditionalMasterSecurityGroups"] = list(self.security_group_ids)
            out["AdditionalSlaveSecurityGroups"] = list(self.security_group_ids)
        out["InstanceGroups"] = [g.to_request() for g in self.instance_groups]
        out["KeepJobFlowAliveWhenNoSteps"] = self.keep_alive_when_no_steps
        return out


@dataclass(frozen=True)
class StepSpec:
    """A ``command-runner.jar`` step."""

    args: Tuple[str, ...]
    name: str = DEFAULT_STEP_NAME
    action_on_failure: str = ACTION_ON_FAILURE_CONTINUE
    jar: str = COMMAND_RUNNER_JAR

    def to_request(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "ActionOnFailure": self.action_on_failure,
            "HadoopJarStep": {
                "Jar": self.jar,
                "Args": list(self.args),
            },
        }


@dataclass(frozen=True)
class ClusterCreationSpec:
    """A complete ``RunJobFlow`` request."""

    name: str
    release_label: str
    applications: Tuple[str, ...]
    service_role: str
    job_flow_role: str
    instances: InstancesConfig
    log_uri: Optional[str] = None
    configurations: Tuple[EmrConfiguration, ...] = ()
    steps: Tuple[StepSpec, ...] = field(default=())

    def to_request(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "Name": self.name,
            "ReleaseLabel": self.release_label,
            "Applications": [{"Name": a} for a in self.applications],
            "ServiceRole": self.service_role,
            "JobFlowRole": self.job_flow_role,
            "Instances": self.instances.to_request(),
        }
        if self.log_uri:
            out["LogUri"] = self.log_uri
        if self.configurations:
            out["Configurations"] = [c.to_request() for c in self.configurations]
        if self.steps:
            out["Steps"] = [s.to_request() for s in self.steps]
        return out


# ---------------------------------------------------------------------------
# Instance groups
# ---------------------------------------------------------------------------


def _market_for(bid_price: Optional[float]) -> Tuple[str, Optional[str]]:
    """Return ``(market, bid_price_string)`` for an optional bid."""
    if bid_price is None:
        return MARKET_ON_DEMAND, None
    if bid_price <= 0:
        raise ConfigError(f"Bid price must be positive, got {bid_price}")
    return MARKET_SPOT, str(bid_price)


def build_instance_groups(
    instance_count: int,
    instance_type: str,
    bid_price: Optional[float] = None,
) -> List[InstanceGroupSpec]:
    """Return the MASTER group plus a CORE group for the remaining nodes.

    ``instance_count`` is the cluster total; the CORE group is only emitted
    when ``instance_count - 1 > 0``.
    """
    if isinstance(instance_count, bool) or not isinstance(instance_count, int):
        raise ConfigError(f"Instance count must be an integer, got {instance_count!r}")
    if instance_count < 1:
        raise ConfigError(f"Instance count must be at least 1, got {instance_count}")

    market, bid = _market_for(bid_price)
    groups = [
        InstanceGroupSpec(
            role=ROLE_MASTER,
            instance_type=instance_type,
            instance_count=1,
            market=market,
            bid_price=bid,
        )
    ]
    core_count = instance_count - 1
    if core_count > 0:
        groups.append(
            InstanceGroupSpec(
                role=ROLE_CORE,
                instance_type=instance_type,
                instance_count=core_count,
                market=market,
                bid_price=bid,
            )
        )
    return groups


# ---------------------------------------------------------------------------
# Instances / creation request
# ---------------------------------------------------------------------------


def build_instances_config(
    subnet_id: Optional[str],
    key_name: Optional[str],
    security_group_ids: Iterable[str],
    groups: Sequence[InstanceGroupSpec],
    *,
    keep_alive_when_no_steps: bool = True,
) -> InstancesConfig:
    """Assemble the ``Instances`` block; extra security groups apply to all nodes."""
    return InstancesConfig(
        instance_groups=tuple(groups),
        subnet_id=subnet_id or None,
        key_name=key_name or None,
        security_group_ids=tuple(security_group_ids),
        keep_alive_when_no_steps=keep_alive_when_no_steps,
    )


def build_creation_request(
    name: str,
    release_label: str,
    applications: Iterable[str],
    service_role: str,
    job_flow_role: str,
    log_uri: Optional[str],
    configurations: Iterable[EmrConfiguration],
    instances: InstancesConfig,
    steps: Iterable[StepSpec] = (),
) -> ClusterCreationSpec:
    return ClusterCreationSpec(
        name=name,
        release_label=release_label,
        applications=tuple(applications),
        service_role=service_role,
        job_flow_role=job_flow_role,
        instances=instances,
        log_uri=log_uri or None,
        configurations=tuple(configurations),
        steps=tuple(steps),
    )


def creation_spec_from_settings(settings: Settings) -> ClusterCreationSpec:
    """Build the long-lived cluster template (keep-alive on) from *settings*."""
    groups = build_instance_groups(
        settings.instance_count,
        settings.instance_type,
        settings.instance_bid_price,
    )
    instances = build_instances_config(
        settings.subnet_id,
        settings.instance_key_name,
        settings.security_group_ids,
        groups,
    )
    return build_creation_request(
        name=settings.cluster_name,
        release_label=settings.emr_release,
        applications=settings.applications,
        service_role=settings.service_role,
        job_flow_role=settings.instance_role,
        log_uri=settings.s3_log_uri,
        configurations=settings.emr_configs,
        instances=instances,
    )


def with_keep_alive(instances: InstancesConfig, keep_alive: bool) -> InstancesConfig:
    return replace(instances, keep_alive_when_no_steps=keep_alive)


def with_appended_step(spec: ClusterCreationSpec, step: StepSpec) -> ClusterCreationSpec:
    """Return *spec* with *step* after any pre-declared steps."""
    return replace(spec, steps=spec.steps + (step,))


# ---------------------------------------------------------------------------
# Spark steps
# ---------------------------------------------------------------------------


def build_spark_submit_args(
    main_class: str,
    artifact_location: str,
    args: Iterable[str] = (),
    submit_confs: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Return the ``spark-submit`` argv run by ``command-runner.jar``.

    Layout: fixed cluster deploy-mode and ``--class`` flags, one ``--conf k=v``
    per entry of *submit_confs* (mapping iteration order), the artifact, then
    the positional *args*.
    """
    if not main_class:
        raise ConfigError("A main class is required to submit a Spark job.")
    cmd = [
        "spark-submit",
        "--deploy-mode", "cluster",
        "--class", main_class,
    ]
    for key, value in (submit_confs or {}).items():
        cmd.extend(["--conf", f"{key}={value}"])
    cmd.append(artifact_location)
    cmd.extend(args)
    return cmd


def build_spark_step(
    main_class: str,
    artifact_location: str,
    args: Iterable[str] = (),
    submit_confs: Optional[Mapping[str, str]] = None,
    *,
    name: str = DEFAULT_STEP_NAME,
) -> StepSpec:
    return StepSpec(
        args=tuple(
            build_spark_submit_args(main_class, artifact_location, args, submit_confs)
        ),
        name=name,
    )
