"""Node.js runtime setup.

The runner image provides node; setup verifies the requested version is the
one on PATH and persists the npm token for later registry access.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.platform.process import run as run_process

from .npm import NpmClient, NpmProtocol

__all__ = [
    "MockNodeInstaller",
    "NodeInstaller",
    "NodeOptions",
    "SystemNodeInstaller",
    "parse_node_version",
    "version_satisfies",
]

_VERSION_RE = re.compile(r"v?(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True, slots=True)
class NodeOptions:
    """`version` is a major (`"20"`), a major.minor, a range like `20.x` or `lts/*`, or None."""

    version: str | None = None


class NodeInstaller(Protocol):
    def install(self, options: NodeOptions, npm_token: str | None) -> Result[str, PipelineError]: ...


def parse_node_version(text: str) -> str | None:
    match = _VERSION_RE.search(text)
    if not match:
        return None
    return ".".join(match.groups())


def version_satisfies(installed: str, requested: str | None) -> bool:
    """Component-wise prefix match: `20` and `20.11` both accept `20.11.1`.

    `x`, `X` and `*` parts are wildcards; `lts/*` and `lts/<codename>` accept
    any installed version.
    """
    if not requested or requested in ("current", "latest", "lts", "node", "*"):
        return True
    if requested.lower().startswith("lts/"):
        return True
    wanted = requested.strip().removeprefix("v").split(".")
    have = installed.split(".")
    if len(wanted) > len(have):
        return False
    return all(part in ("x", "X", "*") or part == got for part, got in zip(wanted, have))


@dataclass(slots=True)
class SystemNodeInstaller:
    npm: NpmProtocol = field(default_factory=NpmClient)

    def install(self, options: NodeOptions, npm_token: str | None) -> Result[str, PipelineError]:
        result = run_process(["node", "--version"], cwd=Path.cwd(), timeout=30.0)
        if isinstance(result, Err):
            return Err(
                PipelineError(
                    kind="step_failed",
                    message="node is not available",
                    hint=str(result.error),
                )
            )

        installed = parse_node_version(result.value)
        if installed is None:
            return Err(
                PipelineError(
                    kind="step_failed",
                    message=f"unexpected `node --version` output: {result.value.strip()!r}",
                )
            )
        if not version_satisfies(installed, options.version):
            return Err(
                PipelineError(
                    kind="step_failed",
                    message=f"node {installed} does not satisfy requested version {options.version}",
                    hint="select the version with actions/setup-node before running cirun",
                )
            )

        if npm_token:
            written = self.npm.write_token(npm_token)
            if isinstance(written, Err):
                return written
        return Ok(installed)


@dataclass(slots=True)
class MockNodeInstaller:
    version: str = "20.11.1"
    error: PipelineError | None = None
    calls: list[tuple[NodeOptions, str | None]] = field(default_factory=list)

    def install(self, options: NodeOptions, npm_token: str | None) -> Result[str, PipelineError]:
        self.calls.append((options, npm_token))
        if self.error is not None:
            return Err(self.error)
        return Ok(self.version)
