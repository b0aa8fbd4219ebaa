"""npm command adapter.

NpmClient shells out to npm/node/npx through `run_process`. MockNpmClient
records calls and replays queued results for tests.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.platform.process import ProcessError
from cirun.platform.process import run as run_process
from cirun.platform.process import run_streaming

__all__ = ["MockNpmClient", "NpmClient", "NpmProtocol", "npmrc_path"]

NPM_REGISTRY_HOST = "registry.npmjs.org"
NPM_TIMEOUT_SECONDS = 5 * 60.0


def npmrc_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    home = env.get("HOME")
    return Path(home) / ".npmrc" if home else Path.home() / ".npmrc"


class NpmProtocol(Protocol):
    def write_token(self, token: str) -> Result[Path, PipelineError]: ...

    def install_dependencies(self, root: Path) -> Result[None, PipelineError]: ...

    def run_script(
        self, root: Path, script: str, env: Mapping[str, str] | None = None
    ) -> Result[None, PipelineError]: ...

    def audit(self, root: Path, level: str) -> Result[None, PipelineError]: ...

    def dist_tags(self, package: str) -> Result[list[str], PipelineError]: ...

    def remove_dist_tag(self, package: str, tag: str) -> Result[None, PipelineError]: ...

    def install_package(self, spec: str, cwd: Path) -> Result[None, PipelineError]: ...

    def require_package(self, package: str, cwd: Path) -> Result[None, PipelineError]: ...

    def npx_package(self, package: str, cwd: Path) -> Result[None, PipelineError]: ...


def _step_error(message: str, error: ProcessError) -> PipelineError:
    return PipelineError(
        kind="step_failed",
        message=message,
        hint=error.stderr.strip() or str(error),
    )


def parse_dist_tags(output: str) -> list[str]:
    """Parse `npm dist-tag ls` output (`<tag>: <version>` per line)."""
    tags: list[str] = []
    for line in output.splitlines():
        tag = line.split(":", 1)[0].strip()
        if tag:
            tags.append(tag)
    return tags


class NpmClient:
    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = env

    def write_token(self, token: str) -> Result[Path, PipelineError]:
        path = npmrc_path(self._env)
        try:
            path.write_text(f"//{NPM_REGISTRY_HOST}/:_authToken={token}\n", encoding="utf-8")
        except OSError as e:
            return Err(
                PipelineError(
                    kind="credential_write",
                    message=f"failed to write npm token to {path}",
                    hint=str(e),
                )
            )
        return Ok(path)

    def install_dependencies(self, root: Path) -> Result[None, PipelineError]:
        result = run_streaming(["npm", "ci"], cwd=root)
        if isinstance(result, Err):
            return Err(_step_error("failed to install dependencies (npm ci)", result.error))
        return Ok(None)

    def run_script(
        self, root: Path, script: str, env: Mapping[str, str] | None = None
    ) -> Result[None, PipelineError]:
        result = run_streaming(["npm", "run", script], cwd=root, env=env)
        if isinstance(result, Err):
            return Err(_step_error(f"npm script `{script}` failed", result.error))
        return Ok(None)

    def audit(self, root: Path, level: str) -> Result[None, PipelineError]:
        result = run_streaming(["npm", "audit", "--production", f"--audit-level={level}"], cwd=root)
        if isinstance(result, Err):
            return Err(_step_error(f"npm audit failed at level `{level}`", result.error))
        return Ok(None)

    def dist_tags(self, package: str) -> Result[list[str], PipelineError]:
        result = run_process(
            ["npm", "dist-tag", "ls", package], cwd=Path.cwd(), timeout=NPM_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(_step_error(f"failed to list dist-tags of {package}", result.error))
        return Ok(parse_dist_tags(result.value))

    def remove_dist_tag(self, package: str, tag: str) -> Result[None, PipelineError]:
        result = run_process(
            ["npm", "dist-tag", "rm", package, tag], cwd=Path.cwd(), timeout=NPM_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(_step_error(f"failed to remove dist-tag `{tag}` of {package}", result.error))
        return Ok(None)

    def install_package(self, spec: str, cwd: Path) -> Result[None, PipelineError]:
        result = run_process(
            ["npm", "install", "--no-save", "--no-package-lock", spec],
            cwd=cwd,
            timeout=NPM_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(_step_error(f"failed to install {spec}", result.error))
        return Ok(None)

    def require_package(self, package: str, cwd: Path) -> Result[None, PipelineError]:
        result = run_process(["node", "-e", f"require({package!r})"], cwd=cwd)
        if isinstance(result, Err):
            return Err(_step_error(f"failed to require {package}", result.error))
        return Ok(None)

    def npx_package(self, package: str, cwd: Path) -> Result[None, PipelineError]:
        result = run_process(
            ["npx", "--no-install", package, "--help"], cwd=cwd, timeout=NPM_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(_step_error(f"failed to run {package} via npx", result.error))
        return Ok(None)


def _queue() -> dict[str, list[Result[object, PipelineError]]]:
    return {}


class MockNpmClient:
    """Records calls; replays queued results per method, else succeeds.

    Usage:
        npm = MockNpmClient(dist_tags=["latest", "canary"])
        npm.queue("remove_dist_tag", Err(PipelineError(kind="step_failed", message="boom")))
    """

    def __init__(self, dist_tags: list[str] | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self._dist_tags = list(dist_tags or [])
        self._queued = _queue()

    def queue(self, method: str, *results: Result[object, PipelineError]) -> None:
        self._queued.setdefault(method, []).extend(results)

    def called(self, method: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == method]

    def _next[T](self, method: str, default: Result[T, PipelineError]) -> Result[T, PipelineError]:
        pending = self._queued.get(method)
        if pending:
            return pending.pop(0)  # type: ignore[return-value]
        return default

    def write_token(self, token: str) -> Result[Path, PipelineError]:
        self.calls.append(("write_token", token))
        return self._next("write_token", Ok(Path("~/.npmrc")))

    def install_dependencies(self, root: Path) -> Result[None, PipelineError]:
        self.calls.append(("install_dependencies", str(root)))
        return self._next("install_dependencies", Ok(None))

    def run_script(
        self, root: Path, script: str, env: Mapping[str, str] | None = None
    ) -> Result[None, PipelineError]:
        self.calls.append(("run_script", script))
        return self._next("run_script", Ok(None))

    def audit(self, root: Path, level: str) -> Result[None, PipelineError]:
        self.calls.append(("audit", level))
        return self._next("audit", Ok(None))

    def dist_tags(self, package: str) -> Result[list[str], PipelineError]:
        self.calls.append(("dist_tags", package))
        return self._next("dist_tags", Ok(list(self._dist_tags)))

    def remove_dist_tag(self, package: str, tag: str) -> Result[None, PipelineError]:
        self.calls.append(("remove_dist_tag", package, tag))
        return self._next("remove_dist_tag", Ok(None))

    def install_package(self, spec: str, cwd: Path) -> Result[None, PipelineError]:
        self.calls.append(("install_package", spec))
        return self._next("install_package", Ok(None))

    def require_package(self, package: str, cwd: Path) -> Result[None, PipelineError]:
        self.calls.append(("require_package", package))
        return self._next("require_package", Ok(None))

    def npx_package(self, package: str, cwd: Path) -> Result[None, PipelineError]:
        self.calls.append(("npx_package", package))
        return self._next("npx_package", Ok(None))
