"""
Listing Errors

Tagged conditions raised while assembling a spot listing.
Each condition carries a stable code so callers can tell them apart
without matching on message text.
"""

from typing import Optional

from aftermarket_contracts.types import DatumEncodingError


class ListingError(Exception):
    """Base class for every listing condition"""

    code = "listing_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidListingInput(ListingError):
    """Asset list, deposit or price failed validation before any encoding"""

    code = "invalid_input"


class AssetNotFound(ListingError):
    """No quantity-1 unit in the wallet matches the requested fingerprint"""

    code = "asset_not_found"

    def __init__(self, fingerprint: str):
        super().__init__(f"Asset with fingerprint {fingerprint} not found in your wallet")
        self.fingerprint = fingerprint


class MissingPaymentCredential(ListingError):
    """Address has no payment part, so nothing can be paid to it"""

    code = "missing_payment_credential"

    def __init__(self, address: str):
        super().__init__(f"Could not extract payment credential from address: {address}")
        self.address = address


class MissingStakeCredential(ListingError):
    """Reward address carries no stake credential for the seller contract address"""

    code = "missing_stake_credential"

    def __init__(self, address: Optional[str]):
        if address:
            message = f"Reward address {address} has no stake credential"
        else:
            message = "Could not get reward address from wallet. Needed for seller script address."
        super().__init__(message)
        self.address = address


class ReferenceScriptMissing(ListingError):
    """The published beacon script UTxO could not be resolved"""

    code = "reference_script_missing"

    def __init__(self, tx_id: str, output_index: int):
        super().__init__(f"Reference script UTxO {tx_id}#{output_index} not found")
        self.tx_id = tx_id
        self.output_index = output_index


class WalletQueryFailed(ListingError):
    """The wallet's UTxOs could not be fetched"""

    code = "wallet_query_failed"


class ChainQueryFailed(ListingError):
    """A ledger query failed for a reason other than the output not existing"""

    code = "chain_query_failed"


class SigningFailed(ListingError):
    """The wallet could not sign the listing transaction"""

    code = "signing_failed"


class TransactionBuildFailed(ListingError):
    """Balancing, coin selection or script evaluation of the listing transaction failed"""

    code = "transaction_build_failed"


class SubmissionRejected(ListingError):
    """The network refused the signed transaction"""

    code = "submission_rejected"

    def __init__(self, reason: str):
        super().__init__(f"Transaction rejected: {reason}")
        self.reason = reason


class UnsupportedNetwork(ListingError):
    """No marketplace deployment is known for the network"""

    code = "unsupported_network"

    def __init__(self, network: str):
        super().__init__(f"No aftermarket deployment configured for network '{network}'")
        self.network = network


class InvalidStateTransition(ListingError):
    """A listing attempt was advanced out of order or after it finished"""

    code = "invalid_state_transition"


__all__ = [
    "ListingError",
    "InvalidListingInput",
    "AssetNotFound",
    "MissingPaymentCredential",
    "MissingStakeCredential",
    "ReferenceScriptMissing",
    "WalletQueryFailed",
    "ChainQueryFailed",
    "SigningFailed",
    "TransactionBuildFailed",
    "SubmissionRejected",
    "UnsupportedNetwork",
    "InvalidStateTransition",
    "DatumEncodingError",
]
