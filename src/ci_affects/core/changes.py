"""Detect whether a commit range touches files under a path prefix."""

from pathlib import Path
from typing import Iterator, List, Optional, Union

import git
from git import Repo
from rich.console import Console
from rich.markup import escape

from ci_affects.core.errors import ChangeQueryError
from ci_affects.models import DetectionResult, Outcome


class ChangeDetector:
    """Answers prefix queries against the files changed in one commit range.

    The commit range is handed to git untouched; anything ``git diff`` accepts
    (``a..b``, ``a...b``, a single revision) works here too.
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        commit_range: str,
        trace: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        if not commit_range:
            raise ValueError("A commit range is required")
        self.project_root = Path(project_root).resolve()
        self.commit_range = commit_range
        self.trace = trace
        self.console = console or Console(highlight=False, soft_wrap=True)
        # Command echoes go to stderr, like `set -x`
        self.err_console = err_console or Console(
            stderr=True, highlight=False, soft_wrap=True
        )
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        """Get the repository the commit range is resolved in."""
        if self._repo is None:
            try:
                self._repo = Repo(self.project_root, search_parent_directories=True)
            except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
                raise ChangeQueryError(
                    self.commit_range, None, f"not a git repository: {e}"
                ) from e
        return self._repo

    @property
    def diff_args(self) -> List[str]:
        # -z keeps paths unquoted; "--" stops git reading the range as a path
        return ["--name-only", "-z", self.commit_range, "--"]

    def changed_files(self) -> Iterator[str]:
        """Yield the changed paths of the commit range in git's order.

        The query runs on first iteration. The generator is single-use, so
        every call runs ``git diff`` again.
        """
        if self.trace:
            self.err_console.print(escape(f"+ git diff {' '.join(self.diff_args)}"))

        try:
            output = self.repo.git.diff(*self.diff_args)
        except git.GitCommandNotFound as e:
            raise ChangeQueryError(
                self.commit_range, None, f"git executable not found: {e}"
            ) from e
        except git.GitCommandError as e:
            raise ChangeQueryError(self.commit_range, e.status, str(e.stderr)) from e

        paths = [path for path in output.split("\0") if path]
        if self.trace:
            for path in paths:
                self.console.print(escape(path))

        yield from paths

    def detect(self, prefix: str) -> DetectionResult:
        """Stop at the first changed path starting with ``prefix``.

        Matching is a literal, case-sensitive prefix test; the empty prefix
        matches any path.
        """
        examined = 0
        for path in self.changed_files():
            examined += 1
            if path.startswith(prefix):
                if self.trace:
                    self.console.print(escape(f"{path} MATCHES"))
                return DetectionResult(
                    outcome=Outcome.CHANGED,
                    commit_range=self.commit_range,
                    prefix=prefix,
                    matched_path=path,
                    examined=examined,
                    reason=f"{path} is under {prefix!r}",
                )
            if self.trace:
                self.console.print(escape(f"NO {path} MATCH"))

        if examined == 0:
            reason = f"No files changed in {self.commit_range}"
        else:
            reason = f"None of {examined} changed files is under {prefix!r}"
        return DetectionResult(
            outcome=Outcome.UNCHANGED,
            commit_range=self.commit_range,
            prefix=prefix,
            examined=examined,
            reason=reason,
        )

    def changed_under(self, prefix: str) -> bool:
        return self.detect(prefix).changed


def changed_under(
    commit_range: str,
    prefix: str,
    project_root: Union[str, Path] = ".",
    trace: bool = False,
    console: Optional[Console] = None,
    err_console: Optional[Console] = None,
) -> bool:
    """Return True if any file changed in ``commit_range`` starts with ``prefix``."""
    detector = ChangeDetector(
        project_root, commit_range, trace=trace, console=console, err_console=err_console
    )
    return detector.changed_under(prefix)
