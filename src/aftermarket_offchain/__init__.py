"""
Aftermarket Off-chain Library

This module provides the off-chain side of the aftermarket spot sale,
separated from the console interface. Contains pure business logic for
fingerprints, beacons, address encoding and listing transactions.
"""

from .addresses import derive_contract_address, from_plutus_address, to_plutus_address
from .assets import AssetId
from .beacons import beacon_units, policy_beacon_name, spot_beacon_name
from .chain_context import CardanoChainContext
from .config import ListingSettings, MarketplaceDeployment, ScriptReference, get_deployment
from .fingerprint import FingerprintResult, calculate_fingerprint
from .listing import ListingAttempt, ListingPlan, ListingState, SpotListingBuilder
from .wallet import CardanoWallet


__all__ = [
    "AssetId",
    "CardanoChainContext",
    "CardanoWallet",
    "FingerprintResult",
    "ListingAttempt",
    "ListingPlan",
    "ListingSettings",
    "ListingState",
    "MarketplaceDeployment",
    "ScriptReference",
    "SpotListingBuilder",
    "beacon_units",
    "calculate_fingerprint",
    "derive_contract_address",
    "from_plutus_address",
    "get_deployment",
    "policy_beacon_name",
    "spot_beacon_name",
    "to_plutus_address",
]
