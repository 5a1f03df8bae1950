"""
Test cases for beacon token names
"""

import hashlib

import pycardano as pc
import pytest

from aftermarket_offchain.beacons import (
    beacon_mint,
    beacon_units,
    policy_beacon_name,
    spot_beacon_name,
)

NFT_POLICY = "a" * 56


class TestBeaconNames:
    def test_policy_beacon_is_prefixed_sha256(self):
        expected = hashlib.sha256(b"\x00" + bytes.fromhex(NFT_POLICY)).hexdigest()
        assert policy_beacon_name(NFT_POLICY) == expected

    def test_policy_beacon_is_not_blake2b(self):
        blake = hashlib.blake2b(b"\x00" + bytes.fromhex(NFT_POLICY), digest_size=32).hexdigest()
        assert policy_beacon_name(NFT_POLICY) != blake

    def test_policy_beacon_depends_on_policy(self):
        assert policy_beacon_name(NFT_POLICY) != policy_beacon_name("b" * 56)

    def test_spot_beacon(self):
        assert spot_beacon_name() == "53706f74"

    def test_invalid_policy_hex(self):
        with pytest.raises(ValueError):
            policy_beacon_name("not hex")


class TestBeaconUnits:
    def test_units_share_beacon_policy(self, deployment):
        policy_beacon, spot_beacon = beacon_units(deployment.beacon_policy_id, NFT_POLICY)

        assert policy_beacon == deployment.beacon_policy_id + policy_beacon_name(NFT_POLICY)
        assert spot_beacon == deployment.beacon_policy_id + "53706f74"

    def test_mint_holds_one_of_each(self, deployment):
        mint = beacon_mint(deployment.beacon_policy_id, NFT_POLICY)

        policy = pc.ScriptHash(bytes.fromhex(deployment.beacon_policy_id))
        assert list(mint.data.keys()) == [policy]
        assets = mint.data[policy]
        assert assets[pc.AssetName(hashlib.sha256(b"\x00" + bytes.fromhex(NFT_POLICY)).digest())] == 1
        assert assets[pc.AssetName(b"Spot")] == 1
        assert len(assets) == 2
