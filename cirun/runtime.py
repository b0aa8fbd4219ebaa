"""Invocation options and the collaborators a pipeline step runs against."""

from __future__ import annotations

import os
import platform
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from cirun.core.config import RunnerConfig
from cirun.core.result import Result
from cirun.git.repository import CloneOptions, GitError, Repository, clone_repository
from cirun.output.console import ConsoleProtocol
from cirun.platform.http import HttpClient, RealHttpClient
from cirun.services.artifacts import ArtifactStore
from cirun.services.node import NodeInstaller, NodeOptions, SystemNodeInstaller
from cirun.services.npm import NpmClient, NpmProtocol

__all__ = ["CloneFn", "GitQueries", "InvokerOptions", "Runtime"]


@dataclass(frozen=True, slots=True)
class InvokerOptions:
    """Options an action passes when it asks for Metadata.

    `node` and `repository` accept True (defaults), False (skip) or explicit
    options.
    """

    github_token: str | None = None
    npm_token: str | None = None
    node: NodeOptions | bool = True
    repository: CloneOptions | bool = True
    upload_artifact: bool = False
    force_warnings: bool = False
    enable_fast_skips: bool = True


class GitQueries(Protocol):
    def last_commit_message(self) -> Result[str, GitError]: ...

    def remote_branches(self, remote: str = "origin") -> Result[list[str], GitError]: ...


type CloneFn = Callable[[CloneOptions, str], Result[Repository, GitError]]


def _environ() -> dict[str, str]:
    return dict(os.environ)


@dataclass(slots=True)
class Runtime:
    root: Path
    console: ConsoleProtocol
    artifacts: ArtifactStore
    config: RunnerConfig = field(default_factory=RunnerConfig)
    http: HttpClient = field(default_factory=RealHttpClient)
    node: NodeInstaller = field(default_factory=SystemNodeInstaller)
    npm: NpmProtocol = field(default_factory=NpmClient)
    git: GitQueries | None = None
    clone: CloneFn = clone_repository
    env: Mapping[str, str] = field(default_factory=_environ)
    clock: Callable[[], float] = time.monotonic

    @property
    def repository(self) -> GitQueries:
        return self.git if self.git is not None else Repository(self.root)

    @property
    def runner_os(self) -> str:
        return self.env.get("RUNNER_OS") or platform.system()

    @property
    def debug(self) -> bool:
        return bool(self.env.get("DEBUG"))
