"""Unit tests for the vote mutator."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from fact_feed.errors import ErrorKind, FactValidationError, WriteError
from fact_feed.services import FeedState, VoteMutator
from fact_feed.services.notifications import VOTE_FAILED_MESSAGE


@pytest.fixture
def loaded_state(facts):
    return FeedState(facts)


@pytest.fixture
def mutator(gateway, loaded_state, notifier):
    return VoteMutator(gateway, loaded_state, notifier)


@pytest.mark.asyncio
async def test_vote_sends_current_plus_one(mutator, gateway, loaded_state):
    """Test the update carries the absolute incremented value for one column."""
    confirmed = await mutator.vote(1, "votesInteresting")

    assert gateway.called("update_fact") == [("update_fact", 1, {"votesInteresting": 13})]
    assert confirmed.votes_interesting == 13
    assert loaded_state.get(1).votes_interesting == 13
    assert [f.id for f in loaded_state] == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_two_sequential_votes(mutator, loaded_state):
    """Test two confirmed votes in a row add exactly two."""
    start = loaded_state.get(3).votes_false

    await mutator.vote(3, "votesFalse")
    await mutator.vote(3, "votesFalse")

    assert loaded_state.get(3).votes_false == start + 2


@pytest.mark.asyncio
async def test_merged_value_is_store_echo(mutator, gateway, loaded_state):
    """Test the feed takes the store's row, not a locally computed one."""
    gateway.rows[2] = gateway.rows[2].model_copy(update={"votes_interesting": 100})

    async def echo_server_value(fact_id, patch):
        gateway.calls.append(("update_fact", fact_id, dict(patch)))
        return gateway.rows[fact_id].model_copy(update={"votes_interesting": 101})

    gateway.update_fact = echo_server_value
    await mutator.vote(2, "votesInteresting")

    assert gateway.calls[-1][2] == {"votesInteresting": 31}
    assert loaded_state.get(2).votes_interesting == 101


@pytest.mark.asyncio
async def test_vote_failure_leaves_feed(mutator, gateway, loaded_state, notifier):
    """Test a failed update raises and changes nothing."""
    gateway.fail.add("update_fact")
    before = loaded_state.facts

    with pytest.raises(WriteError) as exc_info:
        await mutator.vote(1, "votesInteresting")

    assert exc_info.value.kind is ErrorKind.WRITE
    assert loaded_state.facts == before
    assert notifier.last.message == VOTE_FAILED_MESSAGE
    assert mutator.is_updating(1) is False


@pytest.mark.asyncio
async def test_no_optimistic_increment(gateway, loaded_state, notifier):
    """Test the counter only changes once the store confirms."""
    release = asyncio.Event()
    original = gateway.update_fact

    async def slow_update(fact_id, patch):
        await release.wait()
        return await original(fact_id, patch)

    gateway.update_fact = slow_update
    mutator = VoteMutator(gateway, loaded_state, notifier)

    task = asyncio.create_task(mutator.vote(4, "votesInteresting"))
    await asyncio.sleep(0)
    assert mutator.is_updating(4) is True
    assert loaded_state.get(4).votes_interesting == 20

    release.set()
    await task
    assert mutator.is_updating(4) is False
    assert loaded_state.get(4).votes_interesting == 21


@pytest.mark.asyncio
async def test_concurrent_votes_on_different_facts(mutator, loaded_state):
    await asyncio.gather(
        mutator.vote(1, "votesInteresting"),
        mutator.vote(2, "votesFalse"),
        mutator.vote(3, "votesMindblowing"),
    )

    assert loaded_state.get(1).votes_interesting == 13
    assert loaded_state.get(2).votes_false == 1
    assert loaded_state.get(3).votes_mindblowing == 1


@pytest.mark.asyncio
async def test_concurrent_votes_from_same_snapshot_lose_one(mutator, gateway, loaded_state):
    """Test the accepted lost-update race: both votes send the same value."""
    original = gateway.update_fact

    async def yielding_update(fact_id, patch):
        await asyncio.sleep(0)
        return await original(fact_id, patch)

    gateway.update_fact = yielding_update
    await asyncio.gather(
        mutator.vote(1, "votesInteresting"),
        mutator.vote(1, "votesInteresting"),
    )

    assert loaded_state.get(1).votes_interesting == 13
    assert [c[2] for c in gateway.called("update_fact")] == [{"votesInteresting": 13}] * 2


@pytest.mark.asyncio
async def test_snake_case_counter_names(mutator, gateway):
    await mutator.vote(1, "votes_false")
    assert gateway.called("update_fact")[0][2] == {"votesFalse": 1}


@pytest.mark.asyncio
async def test_unknown_fact_or_counter(mutator, gateway):
    with pytest.raises(FactValidationError):
        await mutator.vote(42, "votesInteresting")
    with pytest.raises(FactValidationError):
        await mutator.vote(1, "votesBoring")

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_vote_through_mock_gateway(loaded_state, notifier, fact_factory):
    """Test the mutator only relies on update_fact."""
    gateway = AsyncMock()
    gateway.update_fact.return_value = fact_factory(4, "Iceland has over 130 volcanoes", votes_interesting=21)
    mutator = VoteMutator(gateway, loaded_state, notifier)

    await mutator.vote(4, "votesInteresting")

    gateway.update_fact.assert_awaited_once_with(4, {"votesInteresting": 21})
    gateway.read_facts.assert_not_called()
    assert loaded_state.get(4).votes_interesting == 21
