"""Tests for the team-management reducer (``domains/team_management.py``).

Covers:
- Each action type's happy path and failure modes.
- Idempotent membership changes return the same state object.
- Purity: inputs are never mutated.
- Unknown action types are a no-op.
"""

from __future__ import annotations

import copy
from typing import Any

import pytest

from issueops.core.errors import DomainError
from issueops.core.models import Action
from issueops.domains.base import TypedAction
from issueops.domains.team_management import (
    INITIAL_STATE,
    TEAM_ACTION_SCHEMA,
    get_team,
    reduce,
    teams_for_user,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _typed(type_: str, **payload: Any) -> TypedAction:
    action = Action(domain="team-management", type=type_, payload=payload)
    return TEAM_ACTION_SCHEMA.parse(action).unwrap()


def _state(members: list[str] | None = None) -> dict[str, Any]:
    return {
        "schemaVersion": 1,
        "data": {
            "teams": {
                "frontend": {
                    "description": "FE team",
                    "owner": "alice",
                    "members": members if members is not None else ["alice"],
                    "createdAt": "2024-01-01T00:00:00.000Z",
                },
            },
        },
    }


# ===========================================================================
# ADD_TO_TEAM
# ===========================================================================

class TestAddToTeam:
    def test_appends_member(self, ctx):
        result = reduce(_state(), _typed("ADD_TO_TEAM", username="bob", teamName="frontend"), ctx)
        assert result.is_ok
        assert result.value["data"]["teams"]["frontend"]["members"] == ["alice", "bob"]

    def test_existing_member_is_noop(self, ctx):
        state = _state(["alice", "bob"])
        result = reduce(state, _typed("ADD_TO_TEAM", username="bob", teamName="frontend"), ctx)
        assert result.value is state

    def test_missing_team_fails(self, ctx):
        result = reduce(_state(), _typed("ADD_TO_TEAM", username="bob", teamName="backend"), ctx)
        assert not result.is_ok
        assert isinstance(result.error, DomainError)
        assert str(result.error) == "Team backend does not exist"

    def test_does_not_mutate_input(self, ctx):
        state = _state()
        before = copy.deepcopy(state)
        reduce(state, _typed("ADD_TO_TEAM", username="bob", teamName="frontend"), ctx)
        assert state == before


# ===========================================================================
# REMOVE_FROM_TEAM
# ===========================================================================

class TestRemoveFromTeam:
    def test_removes_member(self, ctx):
        result = reduce(
            _state(["alice", "bob", "carol"]),
            _typed("REMOVE_FROM_TEAM", username="bob", teamName="frontend"),
            ctx,
        )
        assert result.value["data"]["teams"]["frontend"]["members"] == ["alice", "carol"]

    def test_non_member_is_noop(self, ctx):
        state = _state()
        result = reduce(state, _typed("REMOVE_FROM_TEAM", username="zed", teamName="frontend"), ctx)
        assert result.value is state

    def test_missing_team_fails(self, ctx):
        result = reduce(_state(), _typed("REMOVE_FROM_TEAM", username="bob", teamName="ops"), ctx)
        assert str(result.error) == "Team ops does not exist"

    def test_owner_can_be_removed(self, ctx):
        result = reduce(_state(), _typed("REMOVE_FROM_TEAM", username="alice", teamName="frontend"), ctx)
        team = result.value["data"]["teams"]["frontend"]
        assert team["members"] == []
        assert team["owner"] == "alice"


# ===========================================================================
# CREATE_TEAM
# ===========================================================================

class TestCreateTeam:
    def test_default_owner_is_invoker(self, ctx):
        result = reduce(
            copy.deepcopy(INITIAL_STATE),
            _typed("CREATE_TEAM", teamName="frontend", description="FE team"),
            ctx,
        )
        assert result.value["data"]["teams"]["frontend"] == {
            "description": "FE team",
            "owner": "alice",
            "members": ["alice"],
            "createdAt": "2024-05-01T12:00:00.000Z",
        }

    def test_explicit_owner(self, ctx):
        result = reduce(
            copy.deepcopy(INITIAL_STATE),
            _typed("CREATE_TEAM", teamName="ops", description="Ops", owner="dave"),
            ctx,
        )
        team = result.value["data"]["teams"]["ops"]
        assert team["owner"] == "dave"
        assert team["members"] == ["dave"]

    def test_duplicate_fails(self, ctx):
        state = _state()
        result = reduce(state, _typed("CREATE_TEAM", teamName="frontend", description="x"), ctx)
        assert not result.is_ok
        assert str(result.error) == "Team frontend already exists"

    def test_other_teams_are_shared_not_copied(self, ctx):
        state = _state()
        result = reduce(state, _typed("CREATE_TEAM", teamName="ops", description="Ops"), ctx)
        new_teams = result.value["data"]["teams"]
        assert new_teams["frontend"] is state["data"]["teams"]["frontend"]
        assert "ops" not in state["data"]["teams"]


# ===========================================================================
# UPDATE_TEAM_DESCRIPTION
# ===========================================================================

class TestUpdateTeamDescription:
    def test_replaces_description_only(self, ctx):
        state = _state(["alice", "bob"])
        result = reduce(
            state,
            _typed("UPDATE_TEAM_DESCRIPTION", teamName="frontend", description="Web"),
            ctx,
        )
        team = result.value["data"]["teams"]["frontend"]
        assert team["description"] == "Web"
        assert team["members"] == ["alice", "bob"]
        assert team["createdAt"] == "2024-01-01T00:00:00.000Z"
        assert state["data"]["teams"]["frontend"]["description"] == "FE team"

    def test_missing_team_fails(self, ctx):
        result = reduce(
            _state(),
            _typed("UPDATE_TEAM_DESCRIPTION", teamName="nope", description="x"),
            ctx,
        )
        assert isinstance(result.error, DomainError)


# ===========================================================================
# Unknown types and queries
# ===========================================================================

class TestUnknownAndQueries:
    def test_unknown_type_returns_state_unchanged(self, ctx):
        state = _state()
        result = reduce(state, _typed("ARCHIVE_TEAM", teamName="frontend"), ctx)
        assert result.is_ok
        assert result.value is state

    def test_teams_for_user(self):
        state = _state(["alice", "bob"])
        assert teams_for_user(state, "bob") == ["frontend"]
        assert teams_for_user(state, "zed") == []

    def test_get_team(self):
        assert get_team(_state(), "frontend")["owner"] == "alice"
        assert get_team(_state(), "backend") is None


class TestPayloadValidation:
    @pytest.mark.parametrize(
        "type_, payload, path",
        [
            ("ADD_TO_TEAM", {"username": "bob"}, "payload.teamName"),
            ("ADD_TO_TEAM", {"username": 7, "teamName": "fe"}, "payload.username"),
            ("CREATE_TEAM", {"teamName": "fe"}, "payload.description"),
            ("UPDATE_TEAM_DESCRIPTION", {"description": "x"}, "payload.teamName"),
        ],
    )
    def test_reports_field_path(self, type_, payload, path):
        action = Action(domain="team-management", type=type_, payload=payload)
        result = TEAM_ACTION_SCHEMA.parse(action)
        assert not result.is_ok
        assert [i.path for i in result.error.issues] == [path]

    def test_wrong_type_reports_expected_and_actual(self):
        action = Action(
            domain="team-management",
            type="ADD_TO_TEAM",
            payload={"username": 7, "teamName": "fe"},
        )
        issue = TEAM_ACTION_SCHEMA.parse(action).error.issues[0]
        assert issue.expected == "string"
        assert issue.actual == 7

    def test_missing_field_expected_required(self):
        action = Action(domain="team-management", type="CREATE_TEAM", payload={"teamName": "fe"})
        issue = TEAM_ACTION_SCHEMA.parse(action).error.issues[0]
        assert issue.expected == "required field"
        assert issue.actual is None

    def test_extra_payload_keys_ignored(self):
        typed = _typed("ADD_TO_TEAM", username="bob", teamName="fe", note="hi")
        assert typed.payload.username == "bob"
        assert typed.payload.team_name == "fe"

    def test_domain_mismatch(self):
        action = Action(domain="billing", type="ADD_TO_TEAM", payload={})
        issue = TEAM_ACTION_SCHEMA.parse(action).error.issues[0]
        assert issue.path == "domain"
