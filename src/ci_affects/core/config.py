"""Configuration and environment handling for ci-affects.

The process environment is read here and nowhere else. Everything the core
needs (commit range, platform marker, trace flag) is resolved into a
``CIEnvironment`` and handed to the detector and the packaging entrypoint
as plain parameters.
"""

import json
import os
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, ValidationError

from ci_affects.core.errors import ConfigError, MissingEnvironmentError

CONFIG_FILENAME = ".ci-affects.json"
TRACE_ENV_VAR = "CI_AFFECTS_TRACE"

_TRUTHY = {"1", "true", "yes", "on"}


class CIConfig(BaseModel):
    """Project-level settings, optionally overridden by ``.ci-affects.json``."""

    commit_range_var: str = "TRAVIS_COMMIT_RANGE"
    platform_marker_var: str = "APPVEYOR"
    publish_script: str = "ci/publish-tarball.sh"
    env_scripts: List[str] = ["ci/env.sh", "ci/rust-version.sh"]
    trace: bool = False

    model_config = {"extra": "forbid"}


class CIEnvironment(BaseModel):
    """Values taken from the CI platform's environment for one invocation."""

    commit_range_var: str
    platform_marker_var: str
    commit_range: Optional[str] = None
    platform_marker: Optional[str] = None
    trace: bool = False

    @classmethod
    def from_environ(
        cls, config: CIConfig, environ: Optional[Mapping[str, str]] = None
    ) -> "CIEnvironment":
        """Snapshot the variables named by ``config`` from ``environ``."""
        if environ is None:
            environ = os.environ

        trace_value = environ.get(TRACE_ENV_VAR, "").strip().lower()
        return cls(
            commit_range_var=config.commit_range_var,
            platform_marker_var=config.platform_marker_var,
            # Empty values count as unset, like `[[ -n $VAR ]]`
            commit_range=environ.get(config.commit_range_var) or None,
            platform_marker=environ.get(config.platform_marker_var) or None,
            trace=config.trace or trace_value in _TRUTHY,
        )

    def require_commit_range(self) -> str:
        if not self.commit_range:
            raise MissingEnvironmentError(self.commit_range_var)
        return self.commit_range

    def require_platform_marker(self) -> str:
        if not self.platform_marker:
            raise MissingEnvironmentError(self.platform_marker_var)
        return self.platform_marker


def load_config(project_root: Path) -> CIConfig:
    """Load ``.ci-affects.json`` from ``project_root``, falling back to defaults."""
    config_file = Path(project_root) / CONFIG_FILENAME
    if not config_file.exists():
        return CIConfig()

    try:
        data = json.loads(config_file.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a JSON object")

    try:
        return CIConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {config_file}: {e}") from e
