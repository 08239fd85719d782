"""Windows CI packaging entrypoint."""

import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.markup import escape

from ci_affects.core.config import CIConfig, CIEnvironment
from ci_affects.core.errors import CommandLaunchError, MissingEnvironmentError
from ci_affects.models import EntrypointResult, Outcome

Runner = Callable[..., subprocess.CompletedProcess]


class PackagingEntrypoint:
    """Gate on the CI platform marker, then hand off to the packaging script.

    The environment scripts are sourced into the same shell as the packaging
    script so that whatever they export is visible to it.
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        config: CIConfig,
        environment: CIEnvironment,
        runner: Optional[Runner] = None,
        console: Optional[Console] = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.config = config
        self.environment = environment
        self.runner = runner or subprocess.run
        self.console = console or Console(highlight=False, soft_wrap=True)

    def build_command(self) -> List[str]:
        """Build the bash invocation that sources the env scripts and publishes."""
        steps = [f"source {shlex.quote(script)}" for script in self.config.env_scripts]
        steps.append("set -x")
        steps.append(shlex.quote(self.config.publish_script))
        return ["bash", "-c", "\n".join(steps)]

    def run(self) -> EntrypointResult:
        try:
            self.environment.require_platform_marker()
        except MissingEnvironmentError as e:
            return EntrypointResult(outcome=Outcome.MISSING_ENV, reason=str(e))

        command = self.build_command()
        if self.environment.trace:
            self.console.print(escape(f"+ {shlex.join(command)}"), style="dim")

        try:
            completed = self.runner(  # noqa: S603
                command, cwd=str(self.project_root), check=False
            )
        except OSError as e:
            raise CommandLaunchError(command[0], e) from e

        if completed.returncode == 0:
            return EntrypointResult(
                outcome=Outcome.SUCCEEDED,
                command=command,
                returncode=0,
                reason=f"{self.config.publish_script} completed",
            )

        return EntrypointResult(
            outcome=Outcome.COMMAND_FAILED,
            command=command,
            returncode=completed.returncode,
            reason=f"{self.config.publish_script} exited with {completed.returncode}",
        )
