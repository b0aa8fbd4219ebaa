"""Git operations."""

from .repository import CloneOptions, GitError, Repository, clone_repository

__all__ = ["CloneOptions", "GitError", "Repository", "clone_repository"]
