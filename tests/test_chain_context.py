"""
Test cases for the BlockFrost backed chain context
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pycardano as pc
import pytest
from blockfrost import ApiError

from aftermarket_offchain.chain_context import CardanoChainContext
from aftermarket_offchain.config import PREPROD_DEPLOYMENT
from aftermarket_offchain.errors import ChainQueryFailed, SubmissionRejected

TX_ID = "6c402050892c8cb0e3e54f803d7ae292d6f5f90745b7f76722f7c303c7085d50"


def api_error(status_code: int) -> ApiError:
    response = MagicMock(status_code=status_code)
    response.json.return_value = {"status_code": status_code, "error": "Error", "message": "failed"}
    return ApiError(response)


class MockChain:
    def setup_method(self):
        """Setup method called before each test"""
        with patch("aftermarket_offchain.chain_context.BlockFrostApi") as api_cls, patch(
            "aftermarket_offchain.chain_context.pc.BlockFrostChainContext"
        ) as context_cls:
            self.chain = CardanoChainContext(PREPROD_DEPLOYMENT, "preprodTestKey")
            self.api = api_cls.return_value
            self.context = context_cls.return_value

        self.address = pc.Address(pc.VerificationKeyHash(bytes.fromhex("c" * 56)), network=pc.Network.TESTNET)

    def create_mock_utxo(self, tx_id: str, index: int) -> pc.UTxO:
        return pc.UTxO(
            pc.TransactionInput(pc.TransactionId(bytes.fromhex(tx_id)), index),
            pc.TransactionOutput(self.address, 2_000_000),
        )


class TestChainContext(MockChain):
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            CardanoChainContext(PREPROD_DEPLOYMENT, None)

    def test_explorer_url(self):
        assert self.chain.get_explorer_url("ab") == "https://preprod.cardanoscan.io/transaction/ab"

    def test_resolve_reference_output(self):
        self.api.transaction_utxos.return_value = SimpleNamespace(
            outputs=[
                SimpleNamespace(output_index=0, address=str(self.address)),
                SimpleNamespace(output_index=1, address=str(self.address)),
            ]
        )
        wanted = self.create_mock_utxo(TX_ID, 0)
        self.context.utxos.return_value = [self.create_mock_utxo(TX_ID, 1), wanted, self.create_mock_utxo("a" * 64, 0)]

        assert self.chain.resolve_outputs_by_reference(TX_ID, 0) == [wanted]
        self.context.utxos.assert_called_once_with(str(self.address))

    def test_spent_reference_output(self):
        self.api.transaction_utxos.return_value = SimpleNamespace(
            outputs=[SimpleNamespace(output_index=0, address=str(self.address))]
        )
        self.context.utxos.return_value = []

        assert self.chain.resolve_outputs_by_reference(TX_ID, 0) == []

    def test_unknown_output_index(self):
        self.api.transaction_utxos.return_value = SimpleNamespace(
            outputs=[SimpleNamespace(output_index=0, address=str(self.address))]
        )

        assert self.chain.resolve_outputs_by_reference(TX_ID, 5) == []
        self.context.utxos.assert_not_called()

    def test_unknown_transaction(self):
        self.api.transaction_utxos.side_effect = api_error(404)

        assert self.chain.resolve_outputs_by_reference(TX_ID, 0) == []

    def test_other_api_errors_become_chain_query_failures(self):
        self.api.transaction_utxos.side_effect = api_error(500)

        with pytest.raises(ChainQueryFailed) as exc_info:
            self.chain.resolve_outputs_by_reference(TX_ID, 0)
        assert exc_info.value.code == "chain_query_failed"
        assert isinstance(exc_info.value.__cause__, ApiError)

    def test_network_errors_become_chain_query_failures(self):
        self.api.transaction_utxos.side_effect = ConnectionError("connection reset")

        with pytest.raises(ChainQueryFailed):
            self.chain.resolve_outputs_by_reference(TX_ID, 0)

    def test_output_address_query_failure(self):
        self.api.transaction_utxos.return_value = SimpleNamespace(
            outputs=[SimpleNamespace(output_index=0, address=str(self.address))]
        )
        self.context.utxos.side_effect = api_error(503)

        with pytest.raises(ChainQueryFailed):
            self.chain.resolve_outputs_by_reference(TX_ID, 0)

    def test_submit_returns_tx_id(self):
        tx = MagicMock()
        tx.id.payload = bytes.fromhex("f" * 64)

        assert self.chain.submit(tx) == "f" * 64
        self.context.submit_tx.assert_called_once_with(tx)

    def test_submit_rejected(self):
        self.context.submit_tx.side_effect = api_error(400)

        with pytest.raises(SubmissionRejected) as exc_info:
            self.chain.submit(MagicMock())
        assert exc_info.value.code == "submission_rejected"

    def test_submit_network_error(self):
        self.context.submit_tx.side_effect = ConnectionError("connection reset")

        with pytest.raises(SubmissionRejected) as exc_info:
            self.chain.submit(MagicMock())
        assert "connection reset" in exc_info.value.reason
