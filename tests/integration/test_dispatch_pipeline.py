"""End-to-end: extract -> dispatch -> state + log, on memory and local stores."""

from __future__ import annotations

import json

import pytest

from issueops.context import build_context
from issueops.core.clock import FixedClock
from issueops.engine.state_store import log_path, state_path
from issueops.extraction import extract_action
from issueops.main import build_runtime
from issueops.storage.local import LocalContentStore
from issueops.storage.memory import InMemoryContentStore

DOMAIN = "team-management"


def _action(type_: str, **payload) -> dict:
    return {"domain": DOMAIN, "type": type_, "payload": payload}


class TestTeamScenario:
    @pytest.mark.asyncio
    async def test_create_add_duplicate(self, dispatcher, store, content, make_ctx):
        alice = make_ctx("alice")

        created = await dispatcher.dispatch(
            _action("CREATE_TEAM", teamName="frontend", description="FE team"), alice,
        )
        assert created.success
        team = created.new_state["data"]["teams"]["frontend"]
        assert team == {
            "description": "FE team",
            "owner": "alice",
            "members": ["alice"],
            "createdAt": alice.timestamp,
        }

        added = await dispatcher.dispatch(
            _action("ADD_TO_TEAM", username="bob", teamName="frontend"), alice,
        )
        assert added.new_state["data"]["teams"]["frontend"]["members"] == ["alice", "bob"]

        again = await dispatcher.dispatch(
            _action("ADD_TO_TEAM", username="bob", teamName="frontend"), alice,
        )
        assert again.success
        assert again.new_state == added.new_state

        writes_before = len(content.writes)
        dup = await dispatcher.dispatch(
            _action("CREATE_TEAM", teamName="frontend", description="other"), alice,
        )
        assert not dup.success
        assert dup.error == "Team frontend already exists"
        assert len(content.writes) == writes_before
        assert await store.get_state(DOMAIN) == added.new_state

        # Only successful dispatches are logged, the idempotent add included.
        log = await store.read_log(DOMAIN)
        assert [e.action.type for e in log] == ["CREATE_TEAM", "ADD_TO_TEAM", "ADD_TO_TEAM"]

    @pytest.mark.asyncio
    async def test_missing_team_writes_nothing(self, dispatcher, content, ctx):
        result = await dispatcher.dispatch(
            _action("ADD_TO_TEAM", username="bob", teamName="ghost"), ctx,
        )
        assert result.error == "Team ghost does not exist"
        assert content.writes == []

    @pytest.mark.asyncio
    async def test_unknown_type_is_logged_noop(self, dispatcher, store, ctx):
        await dispatcher.dispatch(
            _action("CREATE_TEAM", teamName="frontend", description=""), ctx,
        )
        before = await store.get_state(DOMAIN)
        result = await dispatcher.dispatch(_action("ARCHIVE_TEAM", teamName="frontend"), ctx)
        assert result.success
        assert result.new_state == before
        assert (await store.get_action_log(DOMAIN, 1))[0].action.type == "ARCHIVE_TEAM"


class TestLogOrdering:
    @pytest.mark.asyncio
    async def test_n_dispatches_n_entries(self, dispatcher, store, clock):
        await dispatcher.dispatch(
            _action("CREATE_TEAM", teamName="t", description="0"),
            build_context("alice", clock=clock),
        )
        for i in range(1, 6):
            clock.advance(1)
            await dispatcher.dispatch(
                _action("UPDATE_TEAM_DESCRIPTION", teamName="t", description=str(i)),
                build_context("alice", clock=clock),
            )

        entries = await store.read_log(DOMAIN)
        assert len(entries) == 6
        assert [e.action.payload["description"] for e in entries] == [
            str(i) for i in range(6)
        ]
        assert [e.timestamp for e in entries] == sorted(e.timestamp for e in entries)

        last_two = await store.get_action_log(DOMAIN, limit=2)
        assert [e.action.payload["description"] for e in last_two] == ["5", "4"]

        assert await store.replay_state(DOMAIN) == await store.get_state(DOMAIN)


class TestFromIssueText:
    @pytest.mark.asyncio
    async def test_extracted_action_dispatches(self, clock):
        runtime = build_runtime(content=InMemoryContentStore())
        reply = (
            "I'll create the team for you:\n\n```json\n"
            + json.dumps(_action("CREATE_TEAM", teamName="backend", description="BE"))
            + "\n```\n\nReply `approve` to confirm."
        )
        action = extract_action(reply)
        result = await runtime.dispatcher.dispatch(
            action, build_context("carol", repository=("acme", "ops"), clock=clock),
        )
        assert result.success
        assert result.new_state["data"]["teams"]["backend"]["owner"] == "carol"
        await runtime.close()


class TestLocalStore:
    @pytest.mark.asyncio
    async def test_state_survives_new_runtime(self, tmp_path, clock):
        ctx = build_context("alice", clock=clock)
        first = build_runtime(content=LocalContentStore(tmp_path))
        await first.dispatcher.dispatch(
            _action("CREATE_TEAM", teamName="frontend", description="FE"), ctx,
        )
        await first.dispatcher.dispatch(
            _action("ADD_TO_TEAM", username="bob", teamName="frontend"), ctx,
        )
        await first.close()

        on_disk = json.loads((tmp_path / state_path(DOMAIN)).read_text())
        assert on_disk["schemaVersion"] == 1
        lines = (tmp_path / log_path(DOMAIN)).read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["username"] == "alice"

        second = build_runtime(content=LocalContentStore(tmp_path))
        assert await second.state_store.get_state(DOMAIN) == on_disk
        assert await second.state_store.replay_state(DOMAIN) == on_disk
        await second.close()

    @pytest.mark.asyncio
    async def test_corrupt_state_blocks_dispatch(self, tmp_path):
        (tmp_path / DOMAIN).mkdir()
        (tmp_path / state_path(DOMAIN)).write_text("{not json")
        runtime = build_runtime(content=LocalContentStore(tmp_path))
        result = await runtime.dispatcher.dispatch(
            _action("CREATE_TEAM", teamName="x", description=""),
            build_context("alice", clock=FixedClock()),
        )
        assert not result.success
        assert result.error.startswith("State unavailable: Corrupt state blob")
        assert not (tmp_path / log_path(DOMAIN)).exists()
