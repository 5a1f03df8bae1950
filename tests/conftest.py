"""
Pytest configuration for aftermarket tests

Fixtures shared by the off-chain and datum tests.
"""

import pycardano as pc
import pytest

from aftermarket_offchain.config import PREPROD_DEPLOYMENT


@pytest.fixture
def deployment():
    """Preprod aftermarket deployment"""
    return PREPROD_DEPLOYMENT


@pytest.fixture
def sample_pkh():
    """Sample payment key hash"""
    return pc.VerificationKeyHash(bytes.fromhex("c" * 56))


@pytest.fixture
def sample_stake_hash():
    """Sample stake key hash"""
    return pc.VerificationKeyHash(bytes.fromhex("d" * 56))


@pytest.fixture
def sample_script_hash():
    """Sample script hash"""
    return pc.ScriptHash(bytes.fromhex("e" * 56))


@pytest.fixture
def base_address(sample_pkh, sample_stake_hash):
    """Base address with key payment and key staking parts"""
    return pc.Address(payment_part=sample_pkh, staking_part=sample_stake_hash, network=pc.Network.TESTNET)


@pytest.fixture
def enterprise_address(sample_pkh):
    """Address without a staking part"""
    return pc.Address(payment_part=sample_pkh, network=pc.Network.TESTNET)


@pytest.fixture
def reward_address(sample_stake_hash):
    """Staking-only address"""
    return pc.Address(staking_part=sample_stake_hash, network=pc.Network.TESTNET)
