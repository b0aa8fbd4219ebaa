"""Tests for cirun.metadata.authorize module."""

from __future__ import annotations

from cirun.metadata.authorize import Authorization, apply_authorization, authorize
from cirun.metadata.model import Metadata, RunnerContext

WHITELISTED = Metadata(
    release_actor_whitelist=("Maintainer",),
    automerge_actor_whitelist=("dependabot[bot]",),
    release_repo_owner_whitelist=("Owner",),
)


def _context(
    actor: str = "maintainer",
    event_name: str = "push",
    owner: str = "owner",
    payload: dict[str, object] | None = None,
) -> RunnerContext:
    return RunnerContext(
        actor=actor,
        event_name=event_name,
        ref="refs/heads/main",
        sha="abc",
        repo_owner=owner,
        repo_name="repo",
        payload=payload or {},
    )


class TestRelease:
    def test_whitelisted_push(self) -> None:
        assert authorize(WHITELISTED, _context()).can_release

    def test_comparison_is_case_insensitive(self) -> None:
        assert authorize(WHITELISTED, _context(actor="MAINTAINER", owner="OWNER")).can_release

    def test_unknown_actor(self) -> None:
        assert not authorize(WHITELISTED, _context(actor="stranger")).can_release

    def test_unknown_owner(self) -> None:
        assert not authorize(WHITELISTED, _context(owner="fork")).can_release

    def test_never_on_pull_request(self) -> None:
        context = _context(event_name="pull_request", payload={"pull_request": {"number": 3}})
        assert not authorize(WHITELISTED, context).can_release

    def test_empty_whitelists(self) -> None:
        assert authorize(Metadata(), _context()) == Authorization()


class TestAutomerge:
    def test_pull_request(self) -> None:
        context = _context(
            actor="dependabot[bot]",
            event_name="pull_request",
            payload={"pull_request": {"number": 3}},
        )
        metadata = apply_authorization(WHITELISTED, context)
        assert metadata.can_automerge
        assert not metadata.can_release

    def test_draft_pull_request(self) -> None:
        context = _context(
            actor="dependabot[bot]",
            event_name="pull_request",
            payload={"pull_request": {"number": 3, "draft": True}},
        )
        assert not authorize(WHITELISTED, context).can_automerge

    def test_push_without_pull_request(self) -> None:
        assert not authorize(WHITELISTED, _context(actor="dependabot[bot]")).can_automerge

    def test_push_with_pull_request_payload(self) -> None:
        context = _context(actor="dependabot[bot]", payload={"pull_request": {"number": 9}})
        assert authorize(WHITELISTED, context).can_automerge

    def test_actor_not_whitelisted(self) -> None:
        context = _context(
            actor="someone", event_name="pull_request", payload={"pull_request": {"number": 3}}
        )
        assert not authorize(WHITELISTED, context).can_automerge


def test_retry_automerge_passes_through() -> None:
    metadata = Metadata(can_retry_automerge=True)
    assert authorize(metadata, _context()).can_retry_automerge
    assert apply_authorization(metadata, _context()).can_retry_automerge
