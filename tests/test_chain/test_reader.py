"""Tests for ChainReader against mocked contract bindings."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError

from jobs_board.chain.reader import ChainReader
from jobs_board.domain.exceptions import ChainReadError, TransportError
from jobs_board.domain.models import ZERO_ADDRESS

POSTER = "0x742d35Cc6634C0532925a3b844Bc9e7595f2bD18"


def _call(result=None, side_effect=None) -> MagicMock:
    """A bound contract function whose .call() is awaited."""
    fn = MagicMock()
    fn.call = AsyncMock(return_value=result, side_effect=side_effect)
    return fn


@pytest.fixture
def contracts() -> dict[str, MagicMock]:
    return {name: MagicMock() for name in ("identity", "reputation", "escrow", "token")}


@pytest.fixture
def chain_reader(contracts: dict[str, MagicMock]) -> ChainReader:
    w3 = MagicMock()
    return ChainReader(w3=w3, backoff_seconds=0, **contracts)


class TestIdentityReads:
    @pytest.mark.asyncio
    async def test_owner_of_unminted_id_is_none(self, chain_reader, contracts) -> None:
        contracts["identity"].functions.ownerOf.return_value = _call(
            side_effect=ContractLogicError("execution reverted: ERC721NonexistentToken")
        )
        assert await chain_reader.get_owner(99) is None

    @pytest.mark.asyncio
    async def test_owner_zero_address_is_none(self, chain_reader, contracts) -> None:
        contracts["identity"].functions.ownerOf.return_value = _call(ZERO_ADDRESS)
        assert await chain_reader.get_owner(1) is None

    @pytest.mark.asyncio
    async def test_owner_transport_failure_raises(self, chain_reader, contracts) -> None:
        contracts["identity"].functions.ownerOf.return_value = _call(side_effect=OSError("connection reset"))
        with pytest.raises(ChainReadError) as exc_info:
            await chain_reader.get_owner(1)
        assert isinstance(exc_info.value, TransportError)
        assert exc_info.value.call == "ownerOf"
        assert contracts["identity"].functions.ownerOf.return_value.call.await_count == 3

    @pytest.mark.asyncio
    async def test_transient_owner_failure_retried(self, chain_reader, contracts) -> None:
        fn = _call(side_effect=[OSError("connection reset"), POSTER])
        contracts["identity"].functions.ownerOf.return_value = fn

        assert await chain_reader.get_owner(4) == POSTER
        assert fn.call.await_count == 2

    @pytest.mark.asyncio
    async def test_revert_not_retried(self, chain_reader, contracts) -> None:
        fn = _call(side_effect=ContractLogicError("execution reverted"))
        contracts["identity"].functions.ownerOf.return_value = fn

        assert await chain_reader.get_owner(4) is None
        assert fn.call.await_count == 1

    @pytest.mark.asyncio
    async def test_balance_checksums_wallet(self, chain_reader, contracts) -> None:
        contracts["identity"].functions.balanceOf.return_value = _call(1)
        assert await chain_reader.get_balance(POSTER.lower()) == 1
        contracts["identity"].functions.balanceOf.assert_called_once_with(Web3.to_checksum_address(POSTER))

    @pytest.mark.asyncio
    async def test_registrations_decoded(self, chain_reader, contracts) -> None:
        event = MagicMock()
        event.get_logs = AsyncMock(
            return_value=[
                {"args": {"agentId": 3, "agentURI": "data:...", "owner": POSTER}, "blockNumber": 120},
            ]
        )
        contracts["identity"].events.Registered.return_value = event

        registrations = await chain_reader.get_registrations(100, 200)

        event.get_logs.assert_awaited_once_with(from_block=100, to_block=200)
        assert registrations[0].agent_id == 3
        assert registrations[0].owner == POSTER
        assert registrations[0].block_number == 120


class TestEscrowReads:
    @pytest.mark.asyncio
    async def test_unfunded_job(self, chain_reader, contracts) -> None:
        contracts["escrow"].functions.getJob.return_value = _call(
            (ZERO_ADDRESS, 0, ZERO_ADDRESS, False, False, 0)
        )
        state = await chain_reader.get_escrow_job("job_1")
        assert not state.is_funded

    @pytest.mark.asyncio
    async def test_funded_job(self, chain_reader, contracts) -> None:
        contracts["escrow"].functions.getJob.return_value = _call(
            (POSTER, 10_000_000, ZERO_ADDRESS, False, False, 1_700_000_000)
        )
        state = await chain_reader.get_escrow_job("job_1")
        assert state.is_funded
        assert state.amount == 10_000_000
        assert state.created_at == 1_700_000_000

    @pytest.mark.asyncio
    async def test_reputation(self, chain_reader, contracts) -> None:
        contracts["reputation"].functions.getReputation.return_value = _call((90 * 10**18, 2))
        assert await chain_reader.get_reputation(5) == (90 * 10**18, 2)


class TestFromSettings:
    def test_binds_checksummed_addresses(self, settings) -> None:
        w3 = MagicMock()
        ChainReader.from_settings(settings, w3=w3)
        addresses = [call.kwargs["address"].lower() for call in w3.eth.contract.call_args_list]
        assert settings.escrow_address.lower() in addresses
        assert len(addresses) == 4


class TestRetries:
    @pytest.mark.asyncio
    async def test_escrow_read_retried_then_succeeds(self, chain_reader, contracts) -> None:
        fn = _call(side_effect=[TimeoutError(), (POSTER, 5_000_000, ZERO_ADDRESS, False, False, 1)])
        contracts["escrow"].functions.getJob.return_value = fn

        state = await chain_reader.get_escrow_job("job_1")

        assert state.amount == 5_000_000
        assert fn.call.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_attempts(self, contracts) -> None:
        reader = ChainReader(w3=MagicMock(), read_attempts=2, backoff_seconds=0, **contracts)
        fn = _call(side_effect=OSError("down"))
        contracts["token"].functions.allowance.return_value = fn

        with pytest.raises(ChainReadError) as exc_info:
            await reader.get_allowance(POSTER, POSTER)

        assert exc_info.value.call == "allowance"
        assert fn.call.await_count == 2
