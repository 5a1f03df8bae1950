"""
Aftermarket CLI Interface

Console interface that uses the core aftermarket library.
Handles user interactions, menus, and display formatting.
"""

import logging
import pathlib
from decimal import Decimal, InvalidOperation
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
PROJECT_ROOT = pathlib.Path(__file__).parent.parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"
load_dotenv(ENV_FILE)

from aftermarket_offchain.assets import AssetId, iter_unit_balances
from aftermarket_offchain.beacons import beacon_units
from aftermarket_offchain.chain_context import CardanoChainContext
from aftermarket_offchain.config import ListingSettings
from aftermarket_offchain.errors import InvalidListingInput
from aftermarket_offchain.fingerprint import calculate_fingerprint, fingerprint_of
from aftermarket_offchain.listing import SpotListingBuilder
from aftermarket_offchain.menu.menu_formatter import MenuFormatter
from aftermarket_offchain.wallet import CardanoWallet

logger = logging.getLogger(__name__)

LOVELACE_PER_ADA = Decimal(1_000_000)


def ada_to_lovelace(ada: str) -> int:
    """
    Convert an ADA amount typed by the user into lovelace

    Raises:
        InvalidListingInput: If the amount is not a number or has sub-lovelace precision
    """
    try:
        lovelace = Decimal(ada.strip()) * LOVELACE_PER_ADA
    except InvalidOperation as e:
        raise InvalidListingInput(f"Invalid ADA amount: {ada!r}") from e
    if not lovelace.is_finite():
        raise InvalidListingInput(f"ADA amount must be a finite number: {ada!r}")
    if lovelace != lovelace.to_integral_value():
        raise InvalidListingInput(f"ADA amount has more than 6 decimals: {ada!r}")
    return int(lovelace)


class AftermarketCLI:
    """Console interface for aftermarket listing operations"""

    def __init__(self, settings: Optional[ListingSettings] = None):
        """Initialize the CLI interface"""
        self.settings = settings or ListingSettings()
        self.deployment = self.settings.deployment

        if not self.settings.blockfrost_api_key:
            raise ValueError("Missing required environment variable: blockfrost_api_key")
        if not self.settings.wallet_mnemonic:
            raise ValueError("Missing required environment variable: wallet_mnemonic")

        # Initialize core components
        self.chain_context = CardanoChainContext(self.deployment, self.settings.blockfrost_api_key)
        self.wallet = CardanoWallet(
            self.settings.wallet_mnemonic,
            self.deployment.cardano_network,
            self.chain_context.get_context(),
        )
        self.listing = SpotListingBuilder(self.deployment, self.wallet, self.chain_context)

        self.menu = MenuFormatter()

    def fingerprint_menu(self):
        """Compute the fingerprint of a policy id and asset name"""
        policy_id = self.menu.get_input("Policy ID (hex)")
        asset_name = self.menu.get_input("Asset name (hex, may be empty)")

        result = calculate_fingerprint(policy_id, asset_name)
        if result.is_degraded:
            self.menu.print_error(f"Could not calculate fingerprint: {result.reason}")
        else:
            self.menu.print_success(f"Fingerprint: {result.value}")

    def show_wallet_nfts(self):
        """List quantity-1 assets held by the wallet with their fingerprints"""
        self.menu.print_section("WALLET NFTS")
        count = 0
        for balance in iter_unit_balances(self.wallet.get_utxos()):
            if balance.quantity != 1:
                continue
            asset = AssetId.from_unit(balance.unit)
            result = fingerprint_of(asset)
            fingerprint = result.value if not result.is_degraded else "unavailable"
            self.menu.print_field(asset.display_name, fingerprint)
            count += 1
        if count == 0:
            self.menu.print_field("No NFTs found", "")
        self.menu.print_footer()

    def beacon_menu(self):
        """Show the beacon units a listing under a policy would mint"""
        policy_id = self.menu.get_input("NFT policy ID (hex)")
        try:
            policy_beacon, spot_beacon = beacon_units(self.deployment.beacon_policy_id, policy_id)
        except ValueError:
            self.menu.print_error("Policy ID must be hex")
            return

        self.menu.print_section("BEACONS")
        self.menu.print_field("Policy beacon", policy_beacon)
        self.menu.print_field("Spot beacon", spot_beacon)
        self.menu.print_footer()

    def list_nft_menu(self):
        """List an NFT from the wallet for a spot sale"""
        fingerprint = self.menu.get_input("Fingerprint of the NFT to list")
        price_input = self.menu.get_input("Sale price (ADA)")

        try:
            price = ada_to_lovelace(price_input)
        except InvalidListingInput as e:
            self.menu.print_error(str(e))
            return

        deposit = self.settings.sale_deposit
        self.menu.print_section("LISTING")
        self.menu.print_field("Fingerprint", fingerprint)
        self.menu.print_field("Price", f"{price / 1_000_000:.6f} ADA")
        self.menu.print_field("Deposit", f"{deposit / 1_000_000:.6f} ADA")
        self.menu.print_footer()

        if not self.menu.confirm_action("Sign and submit this listing?"):
            self.menu.print_info("Listing cancelled")
            return

        result = self.listing.list_for_sale([fingerprint], deposit=deposit, price=[{"amount": price}])
        if result["success"]:
            self.menu.print_success(result["message"])
            self.menu.print_field("Transaction", result["tx_id"])
            self.menu.print_field("Explorer", result["explorer_url"])
            self.menu.print_field("Contract address", result["contract_address"])
        else:
            self.menu.print_error(f"{result['error']} [{result['error_code']}]")

    def display_deployment_info(self):
        """Show the aftermarket scripts used on this network"""
        self.menu.print_section("DEPLOYMENT")
        self.menu.print_field("Network", self.deployment.network)
        self.menu.print_field("Beacon policy", self.deployment.beacon_policy_id)
        self.menu.print_field("Aftermarket script", self.deployment.aftermarket_script_hash)
        self.menu.print_field("Observer script", self.deployment.aftermarket_observer_hash)
        self.menu.print_field("Proxy script", self.deployment.proxy_script_hash)
        self.menu.print_field("Beacon reference", str(self.deployment.beacon_script_reference))
        self.menu.print_footer()

    def interactive_menu(self):
        """Main interactive menu"""
        while True:
            self.menu.print_header("AFTERMARKET", "Spot Sale Listing Interface")
            self.menu.print_status_bar(self.deployment.network.upper(), self.wallet.get_payment_address())

            self.menu.print_section("MAIN MENU")
            self.menu.print_menu_option("1", "Calculate Asset Fingerprint")
            self.menu.print_menu_option("2", "Show Wallet NFTs")
            self.menu.print_menu_option("3", "Show Beacon Names")
            self.menu.print_menu_option("4", "List NFT for Sale")
            self.menu.print_menu_option("5", "Deployment Info")
            self.menu.print_separator()
            self.menu.print_menu_option("0", "Exit Application")
            self.menu.print_footer()

            choice = self.menu.get_input("Select an option (0-5)")

            if choice == "0":
                self.menu.print_info("Goodbye!")
                break
            elif choice == "1":
                self.fingerprint_menu()
            elif choice == "2":
                self.show_wallet_nfts()
            elif choice == "3":
                self.beacon_menu()
            elif choice == "4":
                self.list_nft_menu()
            elif choice == "5":
                self.display_deployment_info()
            else:
                self.menu.print_error("Invalid option. Please try again.")


def main():
    """Main function to run the CLI"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = ListingSettings()
    missing_vars = [
        name for name, value in (("wallet_mnemonic", settings.wallet_mnemonic), ("blockfrost_api_key", settings.blockfrost_api_key))
        if not value
    ]
    if missing_vars:
        print("Missing required environment variables:")
        for var in missing_vars:
            print(f"  - {var}")
        print("\nPlease create a .env file with:")
        print("network=testnet")
        print("wallet_mnemonic=your wallet mnemonic phrase here")
        print("blockfrost_api_key=your blockfrost api key here")
        return

    try:
        print("Initializing aftermarket CLI...")
        cli = AftermarketCLI(settings)
        cli.interactive_menu()
    except ValueError as e:
        print(f"Error initializing CLI: {e}")


if __name__ == "__main__":
    main()
