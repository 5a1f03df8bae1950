"""
Test cases for the aftermarket console interface
"""

from unittest.mock import MagicMock, patch

import pytest

from aftermarket_offchain.config import DEFAULT_SALE_DEPOSIT, PREPROD_DEPLOYMENT
from aftermarket_offchain.errors import InvalidListingInput
from aftermarket_offchain.menu.cardano_cli import AftermarketCLI, ada_to_lovelace, main


class TestAdaToLovelace:
    @pytest.mark.parametrize(
        "ada, lovelace",
        [("10", 10_000_000), ("1.5", 1_500_000), (" 0.000001 ", 1), ("250", 250_000_000)],
    )
    def test_conversion(self, ada, lovelace):
        assert ada_to_lovelace(ada) == lovelace

    @pytest.mark.parametrize("ada", ["abc", "", "0.0000001", "Infinity", "-Infinity", "NaN", "sNaN"])
    def test_invalid(self, ada):
        with pytest.raises(InvalidListingInput):
            ada_to_lovelace(ada)


class TestAftermarketCLI:
    def setup_method(self):
        """Build a CLI around mocked collaborators"""
        self.cli = AftermarketCLI.__new__(AftermarketCLI)
        self.cli.settings = MagicMock(sale_deposit=DEFAULT_SALE_DEPOSIT)
        self.cli.deployment = PREPROD_DEPLOYMENT
        self.cli.wallet = MagicMock()
        self.cli.listing = MagicMock()
        self.cli.menu = MagicMock()

    def test_list_nft_converts_price_and_uses_deposit(self):
        self.cli.menu.get_input.side_effect = ["asset1xyz", "10"]
        self.cli.menu.confirm_action.return_value = True
        self.cli.listing.list_for_sale.return_value = {
            "success": True,
            "message": "Transaction submitted successfully!",
            "tx_id": "f" * 64,
            "explorer_url": PREPROD_DEPLOYMENT.explorer_tx_url("f" * 64),
            "contract_address": "addr_test1...",
        }

        self.cli.list_nft_menu()

        self.cli.listing.list_for_sale.assert_called_once_with(
            ["asset1xyz"], deposit=5_000_000, price=[{"amount": 10_000_000}]
        )
        self.cli.menu.print_success.assert_called_once_with("Transaction submitted successfully!")

    def test_list_nft_cancelled(self):
        self.cli.menu.get_input.side_effect = ["asset1xyz", "10"]
        self.cli.menu.confirm_action.return_value = False

        self.cli.list_nft_menu()

        self.cli.listing.list_for_sale.assert_not_called()

    def test_list_nft_bad_price(self):
        self.cli.menu.get_input.side_effect = ["asset1xyz", "ten"]

        self.cli.list_nft_menu()

        self.cli.menu.print_error.assert_called_once()
        self.cli.listing.list_for_sale.assert_not_called()

    def test_list_nft_failure_shows_code(self):
        self.cli.menu.get_input.side_effect = ["asset1xyz", "10"]
        self.cli.menu.confirm_action.return_value = True
        self.cli.listing.list_for_sale.return_value = {
            "success": False,
            "state": "failed",
            "error": "Asset with fingerprint asset1xyz not found in your wallet",
            "error_code": "asset_not_found",
        }

        self.cli.list_nft_menu()

        message = self.cli.menu.print_error.call_args[0][0]
        assert "asset_not_found" in message

    def test_beacon_menu_rejects_bad_policy(self):
        self.cli.menu.get_input.return_value = "xyz"

        self.cli.beacon_menu()

        self.cli.menu.print_error.assert_called_once()

    def test_fingerprint_menu(self):
        self.cli.menu.get_input.side_effect = ["0" * 56, "4d794e4654"]

        self.cli.fingerprint_menu()

        message = self.cli.menu.print_success.call_args[0][0]
        assert message.startswith("Fingerprint: asset")

    def test_exit_option(self):
        self.cli.menu.get_input.return_value = "0"
        self.cli.wallet.get_payment_address.return_value = "addr_test1" + "q" * 50

        self.cli.interactive_menu()

        self.cli.menu.print_info.assert_called_once_with("Goodbye!")


class TestMain:
    def test_missing_environment(self, capsys):
        settings = MagicMock(wallet_mnemonic=None, blockfrost_api_key=None)

        with patch("aftermarket_offchain.menu.cardano_cli.ListingSettings", return_value=settings):
            main()

        output = capsys.readouterr().out
        assert "wallet_mnemonic" in output
        assert "blockfrost_api_key" in output
