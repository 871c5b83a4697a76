"""S3 artifact handling: URL parsing and job-artifact upload.

Public API
----------
- :class:`S3Url` — ``s3://bucket/key`` value with ``/`` joining
- :func:`extra_args_decorator` — build a ``put_object`` request decorator
- :func:`upload_artifact` — put a local file under a jar folder
- :func:`resolve_artifact` — use an ``s3://`` location as-is, upload anything else
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from emr_spark.errors import ConfigError

logger = logging.getLogger(__name__)

S3_SCHEME = "s3://"

#: Receives the ``put_object`` keyword dict and returns the one to send.
PutObjectDecorator = Callable[[Dict[str, Any]], Dict[str, Any]]


# ---------------------------------------------------------------------------
# S3Url
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class S3Url:
    """An ``s3://bucket/key`` location.

    ``S3Url.parse("s3://b/jars") / "app.jar"`` → ``s3://b/jars/app.jar``.
    """

    bucket: str
    key: str = ""

    @classmethod
    def parse(cls, url: str) -> "S3Url":
        if not url or not url.startswith(S3_SCHEME):
            raise ConfigError(f"Not an S3 URL (expected s3://bucket/key): {url!r}")
        rest = url[len(S3_SCHEME):]
        bucket, _, key = rest.partition("/")
        if not bucket:
            raise ConfigError(f"S3 URL has no bucket: {url!r}")
        return cls(bucket=bucket, key=key.strip("/"))

    def __truediv__(self, part: str) -> "S3Url":
        part = part.strip("/")
        key = f"{self.key}/{part}" if self.key else part
        return S3Url(bucket=self.bucket, key=key)

    def __str__(self) -> str:
        if self.key:
            return f"{S3_SCHEME}{self.bucket}/{self.key}"
        return f"{S3_SCHEME}{self.bucket}"


def is_s3_url(value: str) -> bool:
    return value.startswith(S3_SCHEME)


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------


def extra_args_decorator(extra_args: Mapping[str, str]) -> PutObjectDecorator:
    """Return a decorator merging *extra_args* (e.g. ``ServerSideEncryption``)."""
    def _decorate(request: Dict[str, Any]) -> Dict[str, Any]:
        return {**request, **extra_args}

    return _decorate


def upload_artifact(
    s3_client: Any,
    local_path: str | Path,
    jar_folder: str,
    *,
    decorator: Optional[PutObjectDecorator] = None,
) -> S3Url:
    """Upload *local_path* into *jar_folder* and return its S3 location.

    API errors propagate unchanged.
    """
    path = Path(local_path)
    if not path.is_file():
        raise ConfigError(f"Artifact not found: {path}")
    dest = S3Url.parse(jar_folder) / path.name

    logger.info("Putting %s to %s", path, dest)
    with open(path, "rb") as body:
        request: Dict[str, Any] = {
            "Bucket": dest.bucket,
            "Key": dest.key,
            "Body": body,
        }
        if decorator is not None:
            request = decorator(request)
        s3_client.put_object(**request)
    return dest


def resolve_artifact(
    s3_client: Any,
    artifact: str,
    jar_folder: Optional[str],
    *,
    decorator: Optional[PutObjectDecorator] = None,
) -> str:
    """Return the S3 location the Spark step should reference.

    An ``s3://`` *artifact* is assumed to be uploaded already.  A local path
    needs *jar_folder* and is uploaded there.
    """
    if is_s3_url(artifact):
        S3Url.parse(artifact)
        return artifact
    if not jar_folder:
        raise ConfigError(
            "s3_jar_folder must be set to upload a local artifact "
            f"({artifact})."
        )
    return str(upload_artifact(s3_client, artifact, jar_folder, decorator=decorator))
