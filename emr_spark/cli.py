"""CLI entry point for emr-spark, built on typer.

Provides cluster lifecycle commands, Spark job submission, monitoring, and
an interactive ``shell`` that keeps the bound cluster id in memory between
commands.

Usage::

    emr-spark --help
    emr-spark create-cluster
    emr-spark submit-job --jar target/app-assembly.jar --main-class com.acme.Main -- arg1 arg2
    emr-spark --cluster-id j-1ABCDEF terminate-cluster
    emr-spark monitor
    emr-spark shell
"""

from __future__ import annotations

import logging
import shlex
import sys
from dataclasses import dataclass
from typing import List, Optional

import typer
from rich.markup import escape

from emr_spark import ui
from emr_spark.aws.context import AWSContext
from emr_spark.config.loader import load_settings
from emr_spark.errors import ConfigError
from emr_spark.session import Session
from emr_spark.workflow.commands import (
    EXIT_CANCELLED,
    EXIT_CONFIG_ERROR,
    EXIT_SUCCESS,
    CommandResult,
    run_bind_cluster,
    run_create_cluster,
    run_list_clusters,
    run_monitor,
    run_submit_job,
    run_terminate_cluster,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="emr-spark",
    help="Launch EMR clusters and run Spark jobs on them.",
    no_args_is_help=True,
    add_completion=False,
)


@dataclass
class CliState:
    session: Session
    aws: AWSContext


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj  # type: ignore[no-any-return]


# ── Root callback (global options) ───────────────────────────────────────────


@app.callback()
def _root_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to settings YAML. Defaults to $EMR_SPARK_CONFIG or ./emr-spark.yaml.",
    ),
    cluster_id: Optional[str] = typer.Option(
        None,
        "--cluster-id",
        envvar="EMR_SPARK_CLUSTER_ID",
        help="Cluster id to bind the session to.",
    ),
    region: Optional[str] = typer.Option(
        None,
        "--region",
        help="AWS region. Defaults to aws_region, then AWS_DEFAULT_REGION / AWS_REGION.",
    ),
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        help="AWS CLI profile. Defaults to aws_profile, then AWS_PROFILE.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
) -> None:
    """emr-spark control plane."""
    if debug:
        logging.basicConfig(level=logging.DEBUG)

    try:
        settings = load_settings(config)
    except ConfigError as exc:
        ui.error_msg(str(exc))
        raise typer.Exit(EXIT_CONFIG_ERROR) from exc

    session = Session.from_settings(settings)
    if cluster_id:
        session = session.bind(cluster_id)
    aws = AWSContext.build(
        region or settings.aws_region,
        profile or settings.aws_profile,
    )
    ctx.obj = CliState(session=session, aws=aws)


def _finish(result: CommandResult) -> None:
    raise typer.Exit(result.exit_code)


# ── Cluster commands ─────────────────────────────────────────────────────────


@app.command("create-cluster")
def create_cluster_cmd(ctx: typer.Context) -> None:
    """Create a long-lived cluster from the settings."""
    state = _state(ctx)
    _finish(run_create_cluster(state.session, state.aws.emr()))


@app.command("bind-cluster")
def bind_cluster_cmd(
    ctx: typer.Context,
    cluster_id: str = typer.Argument(..., help="Id of an active cluster."),
) -> None:
    """Check that CLUSTER_ID is active and bind to it."""
    state = _state(ctx)
    _finish(run_bind_cluster(state.session, state.aws.emr(), cluster_id))


@app.command("terminate-cluster")
def terminate_cluster_cmd(ctx: typer.Context) -> None:
    """Terminate the bound cluster (see --cluster-id)."""
    state = _state(ctx)
    _finish(run_terminate_cluster(state.session, state.aws.emr()))


@app.command("list-clusters")
def list_clusters_cmd(ctx: typer.Context) -> None:
    """List active clusters."""
    state = _state(ctx)
    _finish(run_list_clusters(state.session, state.aws.emr()))


# ── Job commands ─────────────────────────────────────────────────────────────


@app.command("submit-job")
def submit_job_cmd(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(
        None, help="Arguments passed to the job's main class."
    ),
    jar: Optional[str] = typer.Option(
        None, "--jar", help="Local artifact to upload to s3_jar_folder."
    ),
    artifact: Optional[str] = typer.Option(
        None, "--artifact", help="Already-uploaded s3:// artifact."
    ),
    main_class: Optional[str] = typer.Option(
        None, "--main-class", help="Entry point class. Defaults to main_class."
    ),
) -> None:
    """Submit a Spark job to the cluster named cluster_name.

    If no active cluster has that name, an ephemeral cluster is created that
    terminates itself once the job finishes.
    """
    state = _state(ctx)
    if bool(jar) == bool(artifact):
        ui.error_msg("Pass exactly one of --jar or --artifact.")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    _finish(
        run_submit_job(
            state.session,
            state.aws.emr(),
            state.aws.s3(),
            jar or artifact,
            args or [],
            main_class=main_class,
        )
    )


@app.command("monitor")
def monitor_cmd(ctx: typer.Context) -> None:
    """Wait for the cluster to finish; terminate it after timeout_minutes."""
    state = _state(ctx)
    try:
        result = run_monitor(state.session, state.aws.emr())
    except KeyboardInterrupt:
        ui.warn("Interrupted; the cluster was left running.")
        raise typer.Exit(EXIT_CANCELLED)
    _finish(result)


# ── Interactive shell ────────────────────────────────────────────────────────

_SHELL_HELP = """\
Commands:
  create-cluster
  bind-cluster <cluster-id>
  terminate-cluster
  list-clusters
  submit-job [--main-class <class>] <jar-or-s3-url> [args...]
  monitor
  exit
"""


def dispatch(state: CliState, argv: List[str]) -> Optional[CommandResult]:
    """Run one shell command line; ``None`` means nothing was executed."""
    if not argv:
        return None
    cmd, rest = argv[0], argv[1:]
    session = state.session

    if cmd == "create-cluster":
        return run_create_cluster(session, state.aws.emr())
    if cmd == "bind-cluster":
        if len(rest) != 1:
            ui.error_msg("usage: bind-cluster <cluster-id>")
            return None
        return run_bind_cluster(session, state.aws.emr(), rest[0])
    if cmd == "terminate-cluster":
        return run_terminate_cluster(session, state.aws.emr())
    if cmd == "list-clusters":
        return run_list_clusters(session, state.aws.emr())
    if cmd == "submit-job":
        main_class = None
        if len(rest) >= 2 and rest[0] == "--main-class":
            main_class, rest = rest[1], rest[2:]
        if not rest:
            ui.error_msg("usage: submit-job [--main-class <class>] <artifact> [args...]")
            return None
        return run_submit_job(
            session,
            state.aws.emr(),
            state.aws.s3(),
            rest[0],
            rest[1:],
            main_class=main_class,
        )
    if cmd == "monitor":
        return run_monitor(session, state.aws.emr())
    if cmd == "help":
        ui.console.print(escape(_SHELL_HELP))
        return None

    ui.error_msg(f"Unknown command: {cmd} (try 'help')")
    return None


@app.command("shell")
def shell_cmd(ctx: typer.Context) -> None:
    """Interactive session that remembers the bound cluster between commands."""
    state = _state(ctx)
    while True:
        try:
            line = ui.console.input(state.session.prompt())
        except (EOFError, KeyboardInterrupt):
            ui.console.print()
            break
        try:
            argv = shlex.split(line)
        except ValueError as exc:
            ui.error_msg(str(exc))
            continue
        if argv and argv[0] in ("exit", "quit"):
            break
        try:
            result = dispatch(state, argv)
        except KeyboardInterrupt:
            ui.warn("Interrupted.")
            continue
        if result is not None:
            state.session = result.session
    raise typer.Exit(EXIT_SUCCESS)


# ── Entry point ──────────────────────────────────────────────────────────────


def main() -> int:
    """Run the CLI and return an exit code."""
    try:
        app()
        return 0
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0


if __name__ == "__main__":
    sys.exit(main())
