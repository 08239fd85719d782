"""Result models returned by the detector and the packaging entrypoint."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class Outcome(str, Enum):
    """Outcome of a single ci-affects invocation."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    MISSING_ENV = "missing_env"
    SUCCEEDED = "succeeded"
    COMMAND_FAILED = "command_failed"


class DetectionResult(BaseModel):
    """Answer to "did the commit range touch anything under this prefix?"."""

    outcome: Outcome
    commit_range: str
    prefix: str
    matched_path: Optional[str] = None
    examined: int = 0
    reason: str = ""

    @property
    def changed(self) -> bool:
        return self.outcome == Outcome.CHANGED

    @property
    def exit_code(self) -> int:
        """0 when something under the prefix changed, 1 otherwise."""
        return 0 if self.changed else 1


class EntrypointResult(BaseModel):
    """Represents one run of the packaging entrypoint."""

    outcome: Outcome
    command: List[str] = []
    returncode: Optional[int] = None
    reason: str = ""

    @property
    def exit_code(self) -> int:
        if self.outcome == Outcome.SUCCEEDED:
            return 0
        # Killed-by-signal returncodes are negative; those map to 1
        if self.outcome == Outcome.COMMAND_FAILED and (self.returncode or 0) > 0:
            return self.returncode
        return 1
