"""Tests for emr_spark.emr.submitter — attach vs. create."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from emr_spark.config.models import Settings
from emr_spark.emr.builder import StepSpec, creation_spec_from_settings
from emr_spark.emr.submitter import ephemeral_creation_spec, submit_job


# ── helpers ──────────────────────────────────────────────────────────────


def _make_emr_client(clusters=None):
    client = MagicMock()
    paginator = MagicMock()
    client.get_paginator.return_value = paginator
    paginator.paginate.return_value = [{"Clusters": clusters or []}]
    client.add_job_flow_steps.return_value = {"StepIds": ["s-1"]}
    client.run_job_flow.return_value = {"JobFlowId": "j-NEW"}
    return client


def _template(**overrides):
    return creation_spec_from_settings(Settings(**overrides))


def _submit(emr, name="X", **kwargs):
    params = dict(
        main_class="com.acme.Main",
        args=["a", "b"],
        submit_confs={"spark.executor.memory": "2g"},
        artifact_location="s3://bucket/jars/app.jar",
        creation_spec=_template(),
    )
    params.update(kwargs)
    return submit_job(emr, name, **params)


# ── TestAttach ───────────────────────────────────────────────────────────


class TestAttachToExisting:
    def test_single_add_steps_no_create(self):
        emr = _make_emr_client(
            [{"Id": "j-1", "Name": "X", "Status": {"State": "WAITING"}}]
        )
        result = _submit(emr)

        emr.add_job_flow_steps.assert_called_once()
        emr.run_job_flow.assert_not_called()
        kwargs = emr.add_job_flow_steps.call_args.kwargs
        assert kwargs["JobFlowId"] == "j-1"
        assert len(kwargs["Steps"]) == 1
        assert result.cluster_id == "j-1"
        assert result.created is False
        assert result.step_ids == ("s-1",)

    def test_step_args(self):
        emr = _make_emr_client(
            [{"Id": "j-1", "Name": "X", "Status": {"State": "RUNNING"}}]
        )
        _submit(emr)
        step = emr.add_job_flow_steps.call_args.kwargs["Steps"][0]
        assert step["ActionOnFailure"] == "CONTINUE"
        assert step["HadoopJarStep"]["Args"] == [
            "spark-submit",
            "--deploy-mode", "cluster",
            "--class", "com.acme.Main",
            "--conf", "spark.executor.memory=2g",
            "s3://bucket/jars/app.jar",
            "a", "b",
        ]


# ── TestCreateEphemeral ──────────────────────────────────────────────────


class TestCreateEphemeral:
    def test_single_create_no_add_steps(self):
        emr = _make_emr_client([])
        result = _submit(emr)

        emr.run_job_flow.assert_called_once()
        emr.add_job_flow_steps.assert_not_called()
        assert result.cluster_id == "j-NEW"
        assert result.created is True

    def test_keep_alive_false_and_step_included(self):
        emr = _make_emr_client([])
        _submit(emr)
        req = emr.run_job_flow.call_args.kwargs
        assert req["Instances"]["KeepJobFlowAliveWhenNoSteps"] is False
        assert len(req["Steps"]) == 1
        assert req["Steps"][0]["HadoopJarStep"]["Args"][0] == "spark-submit"

    def test_inactive_same_name_creates(self):
        emr = _make_emr_client(
            [{"Id": "j-old", "Name": "X", "Status": {"State": "TERMINATED"}}]
        )
        result = _submit(emr)
        assert result.created is True
        emr.add_job_flow_steps.assert_not_called()

    def test_cluster_name_used_for_new_cluster(self):
        emr = _make_emr_client([])
        _submit(emr, name="adhoc", creation_spec=_template(cluster_name="tmpl"))
        assert emr.run_job_flow.call_args.kwargs["Name"] == "adhoc"


class TestEphemeralCreationSpec:
    def test_appends_after_predeclared_steps(self):
        setup_step = StepSpec(args=("echo",), name="setup")
        template = _template()
        template = replace(template, steps=(setup_step,))
        job_step = StepSpec(args=("spark-submit",))

        spec = ephemeral_creation_spec(template, "X", job_step)
        assert spec.steps == (setup_step, job_step)
        assert spec.instances.keep_alive_when_no_steps is False
        assert template.instances.keep_alive_when_no_steps is True


# ── Transport errors ─────────────────────────────────────────────────────


def _client_error(operation):
    return ClientError(
        {"Error": {"Code": "ValidationException", "Message": "bad request"}},
        operation,
    )


class TestTransportErrors:
    def test_add_steps_error_propagates(self):
        emr = _make_emr_client(
            [{"Id": "j-1", "Name": "X", "Status": {"State": "WAITING"}}]
        )
        error = _client_error("AddJobFlowSteps")
        emr.add_job_flow_steps.side_effect = error

        with pytest.raises(ClientError) as exc_info:
            _submit(emr)

        assert exc_info.value is error
        emr.add_job_flow_steps.assert_called_once()
        emr.run_job_flow.assert_not_called()

    def test_run_job_flow_error_propagates(self):
        emr = _make_emr_client([])
        error = _client_error("RunJobFlow")
        emr.run_job_flow.side_effect = error

        with pytest.raises(ClientError) as exc_info:
            _submit(emr)

        assert exc_info.value is error
        emr.run_job_flow.assert_called_once()
        emr.add_job_flow_steps.assert_not_called()

    def test_list_clusters_error_stops_before_submitting(self):
        emr = _make_emr_client()
        error = _client_error("ListClusters")
        emr.get_paginator.return_value.paginate.side_effect = error

        with pytest.raises(ClientError) as exc_info:
            _submit(emr)

        assert exc_info.value is error
        emr.add_job_flow_steps.assert_not_called()
        emr.run_job_flow.assert_not_called()
