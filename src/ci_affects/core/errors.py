"""Exceptions raised by the ci-affects core."""

from typing import Optional


class CIAffectsError(Exception):
    """Base class for ci-affects failures."""

    exit_code = 1


class ConfigError(CIAffectsError):
    """The project config file could not be read or validated."""


class MissingEnvironmentError(CIAffectsError):
    """A required CI environment variable is not set."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"{variable} not defined")


class ChangeQueryError(CIAffectsError):
    """Listing the changed files of a commit range failed."""

    def __init__(self, commit_range: str, status: Optional[int], stderr: str = ""):
        self.commit_range = commit_range
        self.status = status
        self.stderr = stderr.strip()
        message = f"git diff --name-only {commit_range} failed"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)

    @property
    def exit_code(self) -> int:
        # git reports unknown revisions with 128; pass whatever it gave us through
        if isinstance(self.status, int) and self.status > 0:
            return self.status
        return 1


class CommandLaunchError(CIAffectsError):
    """An external command could not be started at all."""

    def __init__(self, command: str, cause: OSError):
        self.command = command
        self.cause = cause
        super().__init__(f"Could not run {command}: {cause}")
