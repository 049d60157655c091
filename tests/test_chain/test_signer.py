"""Tests for signer failure classification and the local account signer."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from web3.exceptions import ContractLogicError, ProviderConnectionError, TimeExhausted, Web3RPCError

from jobs_board.chain.signer import LocalAccountSigner, build_signer, classify_error
from jobs_board.domain.exceptions import (
    ConfirmationTimeoutError,
    SignerRejectedError,
    TransactionRevertedError,
    TransportError,
)

# Well-known test key (hardhat account #0); never holds real funds.
TEST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class TestClassifyError:
    def test_revert(self) -> None:
        error = classify_error(ContractLogicError("execution reverted: Not poster"))
        assert isinstance(error, TransactionRevertedError)
        assert "Not poster" in error.message

    def test_user_rejection_by_code(self) -> None:
        exc = Web3RPCError("rejected", rpc_response={"error": {"code": 4001, "message": "nope"}})
        assert isinstance(classify_error(exc), SignerRejectedError)

    def test_user_rejection_by_message(self) -> None:
        exc = Web3RPCError("User denied transaction signature")
        assert isinstance(classify_error(exc), SignerRejectedError)

    def test_other_rpc_error_is_transport(self) -> None:
        exc = Web3RPCError("nonce too low", rpc_response={"error": {"code": -32000, "message": "nonce too low"}})
        assert isinstance(classify_error(exc), TransportError)

    def test_connection_failure(self) -> None:
        assert isinstance(classify_error(ProviderConnectionError("down")), TransportError)
        assert isinstance(classify_error(asyncio.TimeoutError()), TransportError)

    def test_domain_errors_pass_through(self) -> None:
        original = SignerRejectedError()
        assert classify_error(original) is original


class TestLocalAccountSigner:
    def test_requires_key(self) -> None:
        with pytest.raises(SignerRejectedError):
            LocalAccountSigner(MagicMock(), "", 8453)

    def test_address_from_key(self) -> None:
        assert LocalAccountSigner(MagicMock(), TEST_KEY, 8453).address == TEST_ADDRESS

    @pytest.mark.asyncio
    async def test_wrong_network_rejected(self) -> None:
        w3 = MagicMock()
        w3.eth.chain_id = asyncio.sleep(0, result=1)
        signer = LocalAccountSigner(w3, TEST_KEY, 8453)
        with pytest.raises(SignerRejectedError, match="Wrong network"):
            await signer.ensure_network()

    @pytest.mark.asyncio
    async def test_receipt_timeout(self) -> None:
        w3 = MagicMock()
        w3.eth.wait_for_transaction_receipt = AsyncMock(side_effect=TimeExhausted("slow"))
        signer = LocalAccountSigner(w3, TEST_KEY, 8453)
        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await signer.wait_for_receipt("0xabc", timeout=1.0)
        assert exc_info.value.tx_hash == "0xabc"

    @pytest.mark.asyncio
    async def test_reverted_receipt(self) -> None:
        w3 = MagicMock()
        w3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 0, "blockNumber": 10})
        w3.eth.get_transaction = AsyncMock(
            return_value={"from": TEST_ADDRESS, "to": TEST_ADDRESS, "input": "0x", "value": 0}
        )
        w3.eth.call = AsyncMock(side_effect=ContractLogicError("execution reverted: Already released"))
        signer = LocalAccountSigner(w3, TEST_KEY, 8453)

        with pytest.raises(TransactionRevertedError) as exc_info:
            await signer.wait_for_receipt("0xdef", timeout=1.0)
        assert exc_info.value.tx_hash == "0xdef"
        assert "Already released" in exc_info.value.message


class TestBuildSigner:
    def test_no_key_no_signer(self, settings) -> None:
        assert build_signer(settings, w3=MagicMock()) is None
