"""Read-only cluster queries against EMR.

Only clusters in :data:`ACTIVATED_STATES` are ever returned.  Results are
fetched fresh on every call; nothing is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

#: Cluster states that count as "still running or starting".
ACTIVATED_STATES: Tuple[str, ...] = ("RUNNING", "STARTING", "WAITING", "BOOTSTRAPPING")


@dataclass(frozen=True)
class ClusterHandle:
    """A cluster as reported by ``ListClusters`` at query time."""

    id: str
    name: str
    status: str

    @property
    def active(self) -> bool:
        return self.status in ACTIVATED_STATES


def _handle_from_summary(summary: Dict[str, Any]) -> ClusterHandle:
    return ClusterHandle(
        id=summary["Id"],
        name=summary.get("Name", ""),
        status=summary.get("Status", {}).get("State", ""),
    )


def iter_active_clusters(emr_client: Any) -> Iterator[ClusterHandle]:
    """Yield active clusters in the provider's listing order.

    API errors propagate unchanged.
    """
    paginator = emr_client.get_paginator("list_clusters")
    for page in paginator.paginate(ClusterStates=list(ACTIVATED_STATES)):
        for summary in page.get("Clusters", []):
            handle = _handle_from_summary(summary)
            if not handle.active:
                logger.debug(
                    "Skipping cluster %s in state %s", handle.id, handle.status
                )
                continue
            yield handle


def list_active_clusters(emr_client: Any) -> Dict[str, ClusterHandle]:
    """Return ``{cluster_id: ClusterHandle}`` for every active cluster."""
    return {c.id: c for c in iter_active_clusters(emr_client)}


def find_cluster_by_name(emr_client: Any, name: str) -> Optional[ClusterHandle]:
    """Return the first active cluster named *name*, or ``None``.

    When several active clusters share the name, the first one in listing
    order wins.  EMR does not document that order as stable.
    """
    for handle in iter_active_clusters(emr_client):
        if handle.name == name:
            logger.debug("Cluster name %r matched %s", name, handle.id)
            return handle
    return None
