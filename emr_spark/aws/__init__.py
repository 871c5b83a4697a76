"""AWS session context and S3 artifact helpers."""

from emr_spark.aws.context import AWSContext, resolve_profile, resolve_region
from emr_spark.aws.s3 import (
    S3Url,
    extra_args_decorator,
    is_s3_url,
    resolve_artifact,
    upload_artifact,
)

__all__ = [
    "AWSContext",
    "S3Url",
    "extra_args_decorator",
    "is_s3_url",
    "resolve_artifact",
    "resolve_profile",
    "resolve_region",
    "upload_artifact",
]
