"""Caller-owned session: settings plus the optional bound cluster id.

Nothing below the workflow layer reads or writes the binding; commands that
change it return a new :class:`Session`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from rich.markup import escape

from emr_spark.config.models import Settings


@dataclass(frozen=True)
class Session:
    settings: Settings
    bound_cluster_id: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Session":
        """Start a session bound to ``settings.cluster_id`` (if any)."""
        return cls(settings=settings, bound_cluster_id=settings.cluster_id)

    def bind(self, cluster_id: str) -> "Session":
        return replace(self, bound_cluster_id=cluster_id)

    def unbind(self) -> "Session":
        return replace(self, bound_cluster_id=None)

    def prompt(self) -> str:
        """Shell prompt as rich markup: ``[j-ABC]> `` with the id in cyan when bound."""
        if self.bound_cluster_id:
            return f"[[cyan]{escape(self.bound_cluster_id)}[/]]> "
        return "> "
