"""Tests for emr_spark.aws.context — region/profile resolution and session factory."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from emr_spark.aws.context import AWSContext, resolve_profile, resolve_region


# ── resolve_region ───────────────────────────────────────────────────


class TestResolveRegion:
    def test_explicit(self, monkeypatch):
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-central-1")
        assert resolve_region("us-west-2") == "us-west-2"

    def test_from_aws_default_region(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-central-1")
        assert resolve_region() == "eu-central-1"

    def test_from_aws_region(self, monkeypatch):
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        monkeypatch.setenv("AWS_REGION", "ap-southeast-1")
        assert resolve_region() == "ap-southeast-1"

    def test_fallback_default(self, monkeypatch):
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        monkeypatch.delenv("AWS_REGION", raising=False)
        assert resolve_region() == "us-east-1"


# ── resolve_profile ──────────────────────────────────────────────────


class TestResolveProfile:
    def test_explicit_overrides_env(self, monkeypatch):
        monkeypatch.setenv("AWS_PROFILE", "env-profile")
        assert resolve_profile("explicit") == "explicit"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AWS_PROFILE", "env-profile")
        assert resolve_profile() == "env-profile"

    def test_default_chain(self, monkeypatch):
        monkeypatch.delenv("AWS_PROFILE", raising=False)
        assert resolve_profile() is None


# ── AWSContext ───────────────────────────────────────────────────────


class TestAWSContext:
    def test_build_resolves(self, monkeypatch):
        monkeypatch.delenv("AWS_PROFILE", raising=False)
        ctx = AWSContext.build("us-west-2")
        assert ctx.region == "us-west-2"
        assert ctx.profile is None

    @patch("emr_spark.aws.context.boto3.Session")
    def test_session_cached(self, mock_session_cls):
        ctx = AWSContext(region="us-west-2", profile="p")
        assert ctx.session is ctx.session
        mock_session_cls.assert_called_once_with(
            profile_name="p", region_name="us-west-2"
        )

    @patch("emr_spark.aws.context.boto3.Session")
    def test_clients(self, mock_session_cls):
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        ctx = AWSContext(region="us-west-2")
        ctx.emr()
        ctx.s3()
        assert [c.args[0] for c in mock_session.client.call_args_list] == ["emr", "s3"]
