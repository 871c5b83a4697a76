"""Tests for emr_spark.emr.builder — request building from settings."""

from __future__ import annotations

import pytest

from emr_spark.config.models import EmrConfiguration, Settings
from emr_spark.emr.builder import (
    ACTION_ON_FAILURE_CONTINUE,
    COMMAND_RUNNER_JAR,
    DEFAULT_STEP_NAME,
    MARKET_ON_DEMAND,
    MARKET_SPOT,
    ROLE_CORE,
    ROLE_MASTER,
    StepSpec,
    build_creation_request,
    build_instance_groups,
    build_instances_config,
    build_spark_step,
    build_spark_submit_args,
    creation_spec_from_settings,
    with_appended_step,
    with_keep_alive,
)
from emr_spark.errors import ConfigError


# ── Instance groups ──────────────────────────────────────────────────────


class TestBuildInstanceGroups:
    def test_single_instance_is_master_only(self):
        groups = build_instance_groups(1, "m3.xlarge")
        assert len(groups) == 1
        assert groups[0].role == ROLE_MASTER
        assert groups[0].instance_count == 1

    def test_multiple_instances_add_core(self):
        groups = build_instance_groups(5, "m5.2xlarge")
        assert [g.role for g in groups] == [ROLE_MASTER, ROLE_CORE]
        assert groups[0].instance_count == 1
        assert groups[1].instance_count == 4
        assert all(g.instance_type == "m5.2xlarge" for g in groups)

    def test_two_instances(self):
        groups = build_instance_groups(2, "m3.xlarge")
        assert groups[1].role == ROLE_CORE
        assert groups[1].instance_count == 1

    def test_bid_price_means_spot(self):
        groups = build_instance_groups(3, "m3.xlarge", 0.5)
        for g in groups:
            assert g.market == MARKET_SPOT
            assert g.bid_price == "0.5"
            assert g.to_request()["BidPrice"] == "0.5"

    def test_no_bid_price_means_on_demand(self):
        groups = build_instance_groups(3, "m3.xlarge", None)
        for g in groups:
            req = g.to_request()
            assert req["Market"] == MARKET_ON_DEMAND
            assert "BidPrice" not in req

    def test_zero_instances_rejected(self):
        with pytest.raises(ConfigError, match="at least 1"):
            build_instance_groups(0, "m3.xlarge")

    def test_non_integer_count_rejected(self):
        with pytest.raises(ConfigError, match="integer"):
            build_instance_groups("3", "m3.xlarge")

    def test_negative_bid_rejected(self):
        with pytest.raises(ConfigError, match="positive"):
            build_instance_groups(1, "m3.xlarge", -1.0)

    def test_request_shape(self):
        req = build_instance_groups(1, "m3.xlarge")[0].to_request()
        assert req == {
            "InstanceRole": "MASTER",
            "Market": "ON_DEMAND",
            "InstanceType": "m3.xlarge",
            "InstanceCount": 1,
        }


# ── Instances config ─────────────────────────────────────────────────────


class TestBuildInstancesConfig:
    def test_optional_fields_omitted(self):
        groups = build_instance_groups(1, "m3.xlarge")
        req = build_instances_config(None, None, [], groups).to_request()
        assert "Ec2SubnetId" not in req
        assert "Ec2KeyName" not in req
        assert "AdditionalMasterSecurityGroups" not in req
        assert "AdditionalSlaveSecurityGroups" not in req
        assert req["KeepJobFlowAliveWhenNoSteps"] is True
        assert len(req["InstanceGroups"]) == 1

    def test_optional_fields_present(self):
        groups = build_instance_groups(2, "m3.xlarge")
        req = build_instances_config(
            "subnet-1", "my-key", ["sg-1", "sg-2"], groups
        ).to_request()
        assert req["Ec2SubnetId"] == "subnet-1"
        assert req["Ec2KeyName"] == "my-key"
        assert req["AdditionalMasterSecurityGroups"] == ["sg-1", "sg-2"]
        assert req["AdditionalSlaveSecurityGroups"] == ["sg-1", "sg-2"]

    def test_empty_strings_treated_as_absent(self):
        groups = build_instance_groups(1, "m3.xlarge")
        req = build_instances_config("", "", [], groups).to_request()
        assert "Ec2SubnetId" not in req
        assert "Ec2KeyName" not in req

    def test_keep_alive_override(self):
        groups = build_instance_groups(1, "m3.xlarge")
        cfg = build_instances_config(None, None, [], groups)
        off = with_keep_alive(cfg, False)
        assert off.to_request()["KeepJobFlowAliveWhenNoSteps"] is False
        # original untouched
        assert cfg.keep_alive_when_no_steps is True


# ── Creation request ─────────────────────────────────────────────────────


def _instances():
    return build_instances_config(None, None, [], build_instance_groups(1, "m3.xlarge"))


class TestBuildCreationRequest:
    def test_minimal(self):
        spec = build_creation_request(
            name="c",
            release_label="emr-5.11.0",
            applications=["Spark"],
            service_role="EMR_DefaultRole",
            job_flow_role="EMR_EC2_DefaultRole",
            log_uri=None,
            configurations=[],
            instances=_instances(),
        )
        req = spec.to_request()
        assert req["Name"] == "c"
        assert req["ReleaseLabel"] == "emr-5.11.0"
        assert req["Applications"] == [{"Name": "Spark"}]
        assert req["ServiceRole"] == "EMR_DefaultRole"
        assert req["JobFlowRole"] == "EMR_EC2_DefaultRole"
        assert "LogUri" not in req
        assert "Configurations" not in req
        assert "Steps" not in req

    def test_log_uri_and_configurations(self):
        conf = EmrConfiguration(
            classification="spark-env",
            configurations=[
                EmrConfiguration(classification="export", properties={"A": "1"})
            ],
        )
        spec = build_creation_request(
            name="c",
            release_label="emr-5.11.0",
            applications=["Spark", "Hadoop"],
            service_role="s",
            job_flow_role="j",
            log_uri="s3://logs/",
            configurations=[conf],
            instances=_instances(),
        )
        req = spec.to_request()
        assert req["LogUri"] == "s3://logs/"
        assert req["Configurations"] == [
            {
                "Classification": "spark-env",
                "Configurations": [
                    {"Classification": "export", "Properties": {"A": "1"}}
                ],
            }
        ]
        assert req["Applications"] == [{"Name": "Spark"}, {"Name": "Hadoop"}]

    def test_with_appended_step_keeps_existing(self):
        first = StepSpec(args=("echo", "hi"), name="setup")
        spec = build_creation_request(
            "c", "emr-5.11.0", ["Spark"], "s", "j", None, [], _instances(),
            steps=[first],
        )
        second = StepSpec(args=("spark-submit",))
        updated = with_appended_step(spec, second)
        assert updated.steps == (first, second)
        assert spec.steps == (first,)


class TestCreationSpecFromSettings:
    def test_defaults(self):
        spec = creation_spec_from_settings(Settings())
        req = spec.to_request()
        assert req["Name"] == "emr-spark"
        assert req["ReleaseLabel"] == "emr-5.11.0"
        assert req["Instances"]["KeepJobFlowAliveWhenNoSteps"] is True
        assert len(req["Instances"]["InstanceGroups"]) == 1

    def test_settings_flow_through(self):
        settings = Settings(
            cluster_name="nightly",
            instance_count=4,
            instance_bid_price=0.25,
            subnet_id="subnet-9",
            s3_log_uri="s3://b/logs",
        )
        req = creation_spec_from_settings(settings).to_request()
        groups = req["Instances"]["InstanceGroups"]
        assert groups[1]["InstanceCount"] == 3
        assert groups[0]["BidPrice"] == "0.25"
        assert req["Instances"]["Ec2SubnetId"] == "subnet-9"
        assert req["LogUri"] == "s3://b/logs"


# ── Spark steps ──────────────────────────────────────────────────────────


class TestSparkSubmitArgs:
    def test_layout(self):
        args = build_spark_submit_args(
            "com.acme.Main",
            "s3://b/jars/app.jar",
            ["in", "out"],
            {"spark.a": "1", "spark.b": "x y"},
        )
        assert args == [
            "spark-submit",
            "--deploy-mode", "cluster",
            "--class", "com.acme.Main",
            "--conf", "spark.a=1",
            "--conf", "spark.b=x y",
            "s3://b/jars/app.jar",
            "in", "out",
        ]

    def test_no_confs_no_args(self):
        args = build_spark_submit_args("M", "s3://b/app.jar")
        assert args[-1] == "s3://b/app.jar"
        assert "--conf" not in args

    def test_main_class_required(self):
        with pytest.raises(ConfigError, match="main class"):
            build_spark_submit_args("", "s3://b/app.jar")


class TestBuildSparkStep:
    def test_step_request(self):
        step = build_spark_step("M", "s3://b/app.jar", ["x"])
        req = step.to_request()
        assert req["Name"] == DEFAULT_STEP_NAME
        assert req["ActionOnFailure"] == ACTION_ON_FAILURE_CONTINUE
        assert req["HadoopJarStep"]["Jar"] == COMMAND_RUNNER_JAR
        assert req["HadoopJarStep"]["Args"][0] == "spark-submit"
        assert req["HadoopJarStep"]["Args"][-1] == "x"
