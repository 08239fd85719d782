"""Main CLI interface for ci-affects."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from ci_affects.core.changes import ChangeDetector
from ci_affects.core.config import CIConfig, CIEnvironment, load_config
from ci_affects.core.errors import CIAffectsError
from ci_affects.core.publish import PackagingEntrypoint

# Prefix checked by the `web3js` shortcut
WEB3JS_PREFIX = "web3.js/"

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def _load_config_or_exit(ctx: click.Context, project_root: Path) -> CIConfig:
    try:
        return load_config(project_root)
    except CIAffectsError as e:
        err_console.print(escape(f"Error: {e}"), style="red")
        ctx.exit(e.exit_code)


def _run_detection(
    ctx: click.Context,
    prefix: str,
    project_path: str,
    commit_range: Optional[str],
    trace: Optional[bool],
) -> None:
    """Resolve the commit range, run the detector and exit with its status."""
    project_root = Path(project_path).resolve()
    config = _load_config_or_exit(ctx, project_root)
    environment = CIEnvironment.from_environ(config)
    if commit_range:
        environment.commit_range = commit_range
    if trace is not None:
        environment.trace = trace

    try:
        detector = ChangeDetector(
            project_root,
            environment.require_commit_range(),
            trace=environment.trace,
            console=console,
            err_console=err_console,
        )
        result = detector.detect(prefix)
    except CIAffectsError as e:
        # Missing range is reported as-is, git failures keep git's status
        err_console.print(escape(str(e)), style="red")
        ctx.exit(e.exit_code)

    if environment.trace:
        console.print(escape(result.reason), style="dim")
    ctx.exit(result.exit_code)


@click.group()
@click.version_option(package_name="ci-affects")
def main():
    """ci-affects - CI helpers for change detection and packaging."""


@main.command()
@click.argument("prefix")
@click.option(
    "--commit-range",
    default=None,
    help="Commit range to inspect (defaults to $TRAVIS_COMMIT_RANGE)",
)
@click.option(
    "--project-path",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Path to the git checkout",
)
@click.option(
    "--trace/--no-trace",
    default=None,
    help="Echo the git query and every path examined",
)
@click.pass_context
def affects(
    ctx: click.Context,
    prefix: str,
    commit_range: Optional[str],
    project_path: str,
    trace: Optional[bool],
):
    """Exit 0 if the commit range changed any file starting with PREFIX, else 1."""
    _run_detection(ctx, prefix, project_path, commit_range, trace)


@main.command()
@click.option(
    "--commit-range",
    default=None,
    help="Commit range to inspect (defaults to $TRAVIS_COMMIT_RANGE)",
)
@click.option(
    "--project-path",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Path to the git checkout",
)
@click.pass_context
def web3js(ctx: click.Context, commit_range: Optional[str], project_path: str):
    """Exit 0 if the commit range touched web3.js/, else 1."""
    _run_detection(ctx, WEB3JS_PREFIX, project_path, commit_range, True)


@main.command()
@click.option(
    "--project-path",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Path to the checkout containing the ci/ scripts",
)
@click.pass_context
def publish(ctx: click.Context, project_path: str):
    """Windows CI entrypoint: source the CI env scripts and publish a tarball."""
    project_root = Path(project_path).resolve()
    config = _load_config_or_exit(ctx, project_root)
    environment = CIEnvironment.from_environ(config)

    entrypoint = PackagingEntrypoint(
        project_root, config, environment, console=err_console
    )
    try:
        result = entrypoint.run()
    except CIAffectsError as e:
        err_console.print(escape(str(e)), style="red")
        ctx.exit(e.exit_code)

    if result.exit_code != 0:
        err_console.print(escape(result.reason), style="red")
    ctx.exit(result.exit_code)


if __name__ == "__main__":
    main()
