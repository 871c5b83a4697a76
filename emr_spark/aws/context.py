"""AWS context: session and region resolution.

Wraps boto3 session creation into a single :class:`AWSContext` that the
workflow layer hands EMR / S3 clients out of.

Region resolution precedence:
1. Explicit ``--region`` CLI flag / ``aws_region`` setting
2. ``AWS_DEFAULT_REGION`` / ``AWS_REGION`` env vars
3. Hardcoded fallback (``us-east-1``)

Profile resolution precedence:
1. Explicit ``--profile`` CLI flag / ``aws_profile`` setting
2. ``AWS_PROFILE`` env var
3. ``None`` — boto3's default credential chain
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

import boto3

logger = logging.getLogger(__name__)

_DEFAULT_REGION = "us-east-1"


# ---------------------------------------------------------------------------
# Resolution helpers
# ---------------------------------------------------------------------------

def resolve_region(region: Optional[str] = None) -> str:
    """Return the AWS region string.

    Precedence: *region* → ``AWS_DEFAULT_REGION`` → ``AWS_REGION`` → fallback.
    """
    return (
        region
        or os.environ.get("AWS_DEFAULT_REGION")
        or os.environ.get("AWS_REGION")
        or _DEFAULT_REGION
    )


def resolve_profile(profile: Optional[str] = None) -> Optional[str]:
    """Return the AWS profile name, or ``None`` for the default chain."""
    return profile or os.environ.get("AWS_PROFILE") or None


# ---------------------------------------------------------------------------
# AWSContext
# ---------------------------------------------------------------------------

@dataclass
class AWSContext:
    """Resolved region/profile plus a lazily created boto3 session.

    Attributes:
        region: AWS region (e.g. ``us-west-2``).
        profile: AWS profile name, ``None`` when using the default chain.
    """

    region: str
    profile: Optional[str] = None
    _session: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def build(
        cls,
        region: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> "AWSContext":
        """Construct an :class:`AWSContext` without touching the network."""
        ctx = cls(region=resolve_region(region), profile=resolve_profile(profile))
        logger.debug("AWS context: region=%s profile=%s", ctx.region, ctx.profile)
        return ctx

    @property
    def session(self) -> boto3.Session:
        """Return the cached :class:`boto3.Session`."""
        if self._session is None:
            self._session = boto3.Session(
                profile_name=self.profile, region_name=self.region
            )
        return self._session

    def client(self, service: str, **kwargs: Any) -> Any:
        """Create a boto3 client for *service*."""
        return self.session.client(service, **kwargs)

    def emr(self) -> Any:
        return self.client("emr")

    def s3(self) -> Any:
        return self.client("s3")
