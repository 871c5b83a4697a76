"""emr-spark - launch EMR clusters and run Spark jobs on them.

Builds ``RunJobFlow`` requests from declarative settings, attaches Spark
steps to a named cluster or creates an ephemeral one, and monitors clusters
with a timeout that force-terminates runaway clusters.
"""

try:
    from importlib.metadata import version

    __version__ = version("emr-spark")
except Exception:
    __version__ = "0.0.0.dev0"

__all__ = ["__version__"]
