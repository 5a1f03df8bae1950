"""
Beacon Names

Beacon tokens let indexers and the aftermarket validators find listings by
content. The policy beacon is bound to the listed NFT policy; the spot
beacon marks the listing as a spot sale.
"""

import hashlib
from typing import Tuple

import pycardano as pc

from aftermarket_contracts.types import BEACON_POLICY_PREFIX, SPOT_BEACON_NAME


def policy_beacon_name_bytes(policy_id_hex: str) -> bytes:
    """sha2-256 of the beacon prefix followed by the raw policy id"""
    return hashlib.sha256(BEACON_POLICY_PREFIX + bytes.fromhex(policy_id_hex)).digest()


def policy_beacon_name(policy_id_hex: str) -> str:
    """
    Policy beacon token name for an NFT policy

    Args:
        policy_id_hex: Issuing policy id of the listed NFTs

    Returns:
        Beacon token name as hex
    """
    return policy_beacon_name_bytes(policy_id_hex).hex()


def spot_beacon_name() -> str:
    return SPOT_BEACON_NAME.hex()


def beacon_units(beacon_policy_id: str, nft_policy_id: str) -> Tuple[str, str]:
    """Full units (policy id + name) of the policy beacon and the spot beacon"""
    return (
        beacon_policy_id + policy_beacon_name(nft_policy_id),
        beacon_policy_id + spot_beacon_name(),
    )


def beacon_mint(beacon_policy_id: str, nft_policy_id: str) -> pc.MultiAsset:
    """Mint value for exactly one policy beacon and one spot beacon"""
    return pc.MultiAsset(
        {
            pc.ScriptHash(bytes.fromhex(beacon_policy_id)): pc.Asset(
                {
                    pc.AssetName(policy_beacon_name_bytes(nft_policy_id)): 1,
                    pc.AssetName(SPOT_BEACON_NAME): 1,
                }
            )
        }
    )
