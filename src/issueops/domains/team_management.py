"""Team-management domain: teams, their owners and members.

State shape (schema version 1)::

    {
      "schemaVersion": 1,
      "data": {
        "teams": {
          "<teamName>": {
            "description": str,
            "owner": str,
            "members": [str, ...],   # ordered, no duplicates
            "createdAt": str         # ISO-8601, context timestamp
          }
        }
      }
    }

The reducer is pure. Every transition builds new dicts along the changed
path and shares the untouched branches with the input state.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from issueops.core.errors import DomainError
from issueops.core.models import ActionContext
from issueops.core.result import Err, Ok, Result

from .base import ActionSchema, DomainDefinition, State, TypedAction
from .validation import Payload

logger = logging.getLogger(__name__)

DOMAIN_NAME = "team-management"
SCHEMA_VERSION = 1


class TeamActionType(str, Enum):
    ADD_TO_TEAM = "ADD_TO_TEAM"
    REMOVE_FROM_TEAM = "REMOVE_FROM_TEAM"
    CREATE_TEAM = "CREATE_TEAM"
    UPDATE_TEAM_DESCRIPTION = "UPDATE_TEAM_DESCRIPTION"


# ---------------------------------------------------------------------------
# Payload variants
# ---------------------------------------------------------------------------

class MembershipPayload(Payload):
    """ADD_TO_TEAM / REMOVE_FROM_TEAM."""

    username: str
    team_name: str = Field(alias="teamName")


class CreateTeamPayload(Payload):
    team_name: str = Field(alias="teamName")
    description: str
    owner: str | None = None


class UpdateTeamDescriptionPayload(Payload):
    team_name: str = Field(alias="teamName")
    description: str


TEAM_ACTION_SCHEMA = ActionSchema(
    DOMAIN_NAME,
    {
        TeamActionType.ADD_TO_TEAM.value: MembershipPayload,
        TeamActionType.REMOVE_FROM_TEAM.value: MembershipPayload,
        TeamActionType.CREATE_TEAM.value: CreateTeamPayload,
        TeamActionType.UPDATE_TEAM_DESCRIPTION.value: UpdateTeamDescriptionPayload,
    },
    open=True,
)


# ---------------------------------------------------------------------------
# State schema
# ---------------------------------------------------------------------------

class Team(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str
    owner: str
    members: list[str]
    created_at: str = Field(alias="createdAt")


class TeamManagementData(BaseModel):
    teams: dict[str, Team]


class TeamManagementState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(alias="schemaVersion")
    data: TeamManagementData


INITIAL_STATE: dict[str, Any] = {
    "schemaVersion": SCHEMA_VERSION,
    "data": {"teams": {}},
}


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def _with_team(state: State, team_name: str, team: dict[str, Any]) -> State:
    """Return a copy of *state* with ``teams[team_name]`` replaced."""
    data = state["data"]
    return {
        **state,
        "data": {
            **data,
            "teams": {**data["teams"], team_name: team},
        },
    }


def _missing(team_name: str) -> Err[DomainError]:
    return Err(DomainError(f"Team {team_name} does not exist"))


def reduce(
    state: State, action: TypedAction, context: ActionContext,
) -> Result[State, DomainError]:
    """Apply one team action. Unknown action types leave *state* unchanged."""
    teams: dict[str, Any] = state["data"]["teams"]

    if action.type == TeamActionType.ADD_TO_TEAM:
        p: MembershipPayload = action.payload
        team = teams.get(p.team_name)
        if team is None:
            return _missing(p.team_name)
        if p.username in team["members"]:
            return Ok(state)
        return Ok(_with_team(state, p.team_name, {
            **team, "members": [*team["members"], p.username],
        }))

    if action.type == TeamActionType.REMOVE_FROM_TEAM:
        p = action.payload
        team = teams.get(p.team_name)
        if team is None:
            return _missing(p.team_name)
        if p.username not in team["members"]:
            return Ok(state)
        return Ok(_with_team(state, p.team_name, {
            **team,
            "members": [m for m in team["members"] if m != p.username],
        }))

    if action.type == TeamActionType.CREATE_TEAM:
        c: CreateTeamPayload = action.payload
        if c.team_name in teams:
            return Err(DomainError(f"Team {c.team_name} already exists"))
        owner = c.owner or context.username
        return Ok(_with_team(state, c.team_name, {
            "description": c.description,
            "owner": owner,
            "members": [owner],
            "createdAt": context.timestamp,
        }))

    if action.type == TeamActionType.UPDATE_TEAM_DESCRIPTION:
        u: UpdateTeamDescriptionPayload = action.payload
        team = teams.get(u.team_name)
        if team is None:
            return _missing(u.team_name)
        return Ok(_with_team(state, u.team_name, {
            **team, "description": u.description,
        }))

    # TODO: turn this into a validation error once issue owners confirm no
    # workflow relies on unrecognised types being accepted.
    logger.warning(
        "Unrecognised %s action type %r; state unchanged",
        DOMAIN_NAME, action.type,
    )
    return Ok(state)


# ---------------------------------------------------------------------------
# Read-only queries
# ---------------------------------------------------------------------------

def get_team(state: State, team_name: str) -> dict[str, Any] | None:
    return state["data"]["teams"].get(team_name)


def teams_for_user(state: State, username: str) -> list[str]:
    """Names of the teams *username* belongs to, in state order."""
    return [
        name for name, team in state["data"]["teams"].items()
        if username in team["members"]
    ]


TEAM_MANAGEMENT = DomainDefinition(
    name=DOMAIN_NAME,
    action_schema=TEAM_ACTION_SCHEMA,
    state_schema=TeamManagementState,
    initial_state=INITIAL_STATE,
    reduce=reduce,
    description="Teams, owners and team membership",
)
