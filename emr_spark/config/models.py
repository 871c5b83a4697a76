"""Pydantic models for emr-spark settings.

Defines the data structures for:
- EMR configuration entries (classification + properties, nestable)
- The full ``emr_spark`` settings section
- The YAML root wrapper
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class EmrConfiguration(BaseModel):
    """A single EMR ``Configurations`` entry.

    Example YAML::

        emr_configs:
          - classification: spark-defaults
            properties:
              spark.executor.memory: 4g
          - classification: hadoop-env
            configurations:
              - classification: export
                properties:
                  JAVA_HOME: /usr/lib/jvm/java-1.8.0
    """

    classification: str
    properties: Dict[str, str] = Field(default_factory=dict)
    configurations: List["EmrConfiguration"] = Field(default_factory=list)

    @field_validator("properties", mode="before")
    @classmethod
    def _stringify_properties(cls, value: Any) -> Any:
        """YAML happily yields ints/bools; EMR wants strings."""
        if isinstance(value, dict):
            return {str(k): _to_str(v) for k, v in value.items()}
        return value

    def to_request(self) -> Dict[str, Any]:
        """Render as the boto3 ``Configurations`` item structure."""
        out: Dict[str, Any] = {"Classification": self.classification}
        if self.properties:
            out["Properties"] = dict(self.properties)
        if self.configurations:
            out["Configurations"] = [c.to_request() for c in self.configurations]
        return out


class Settings(BaseModel):
    """Every knob the cluster and job commands read.

    Defaults follow the long-standing plugin defaults (EMR 5.11, a single
    ``m3.xlarge`` node, on-demand market, 90 minute monitor timeout).
    """

    cluster_name: str = "emr-spark"
    cluster_id: Optional[str] = None
    aws_region: Optional[str] = None
    aws_profile: Optional[str] = None

    emr_release: str = "emr-5.11.0"
    service_role: str = "EMR_DefaultRole"
    emr_configs: List[EmrConfiguration] = Field(default_factory=list)
    applications: List[str] = Field(default_factory=lambda: ["Spark"])

    subnet_id: Optional[str] = None
    security_group_ids: List[str] = Field(default_factory=list)

    instance_count: int = 1
    instance_type: str = "m3.xlarge"
    instance_bid_price: Optional[float] = None
    instance_role: str = "EMR_EC2_DefaultRole"
    instance_key_name: Optional[str] = None

    s3_jar_folder: Optional[str] = None
    s3_log_uri: Optional[str] = None
    put_object_extra_args: Dict[str, str] = Field(default_factory=dict)

    timeout_minutes: float = 90
    submit_confs: Dict[str, str] = Field(default_factory=dict)
    main_class: Optional[str] = None

    @field_validator("instance_count")
    @classmethod
    def _check_instance_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"instance_count must be at least 1, got {value}")
        return value

    @field_validator("instance_bid_price")
    @classmethod
    def _check_bid_price(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError(f"instance_bid_price must be positive, got {value}")
        return value

    @field_validator("timeout_minutes")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"timeout_minutes must be positive, got {value}")
        return value

    @field_validator("submit_confs", mode="before")
    @classmethod
    def _stringify_confs(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): _to_str(v) for k, v in value.items()}
        return value

    @property
    def timeout_seconds(self) -> float:
        return float(self.timeout_minutes) * 60.0


class ConfigFile(BaseModel):
    """Root model wrapping the ``emr_spark:`` key."""

    emr_spark: Settings = Field(default_factory=Settings)


def _to_str(value: Any) -> str:
    """``True`` → ``"true"`` so booleans read the way Spark/Hadoop expect."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
