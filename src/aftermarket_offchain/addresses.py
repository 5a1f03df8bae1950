"""
Address Codec

Conversion between bech32 Cardano addresses and the Plutus address data the
aftermarket validators receive, plus derivation of per-seller contract
addresses.
"""

import logging
from typing import Optional, Union

import pycardano as pc
from opshin.prelude import (
    Address,
    NoStakingCredential,
    PubKeyCredential,
    ScriptCredential,
    SomeStakingCredential,
    StakingHash,
    StakingPtr,
)

from .errors import InvalidListingInput, MissingPaymentCredential

logger = logging.getLogger(__name__)

StakePart = Union[pc.VerificationKeyHash, pc.ScriptHash, pc.PointerAddress]


def parse_address(address: Union[str, pc.Address]) -> pc.Address:
    """
    Parse a bech32 address string into a pycardano Address

    Raises:
        InvalidListingInput: If the string is not a valid Shelley address
    """
    if isinstance(address, pc.Address):
        return address
    try:
        return pc.Address.from_primitive(address)
    except (ValueError, TypeError, pc.PyCardanoException) as e:
        raise InvalidListingInput(f"Invalid address {address}: {e}") from e


def _credential(part: Union[pc.VerificationKeyHash, pc.ScriptHash]):
    if isinstance(part, pc.ScriptHash):
        return ScriptCredential(part.payload)
    return PubKeyCredential(part.payload)


def _staking_credential(part: Optional[StakePart]):
    if part is None:
        return NoStakingCredential()
    if isinstance(part, pc.PointerAddress):
        return SomeStakingCredential(StakingPtr(part.slot, part.tx_index, part.cert_index))
    return SomeStakingCredential(StakingHash(_credential(part)))


def to_plutus_address(address: Union[str, pc.Address]) -> Address:
    """
    Convert an address into the Plutus data form used in datums

    Args:
        address: Bech32 address string or pycardano Address

    Returns:
        Plutus Address with payment credential and optional staking credential

    Raises:
        MissingPaymentCredential: If the address has no payment part
    """
    parsed = parse_address(address)
    if parsed.payment_part is None:
        raise MissingPaymentCredential(str(address))

    return Address(_credential(parsed.payment_part), _staking_credential(parsed.staking_part))


def from_plutus_address(address: Address, network: pc.Network) -> pc.Address:
    """Inverse of to_plutus_address for the given network"""
    credential = address.payment_credential
    if isinstance(credential, ScriptCredential):
        payment_part = pc.ScriptHash(credential.credential_hash)
    else:
        payment_part = pc.VerificationKeyHash(credential.credential_hash)

    staking_part = None
    staking = address.staking_credential
    if isinstance(staking, SomeStakingCredential):
        inner = staking.staking_credential
        if isinstance(inner, StakingPtr):
            staking_part = pc.PointerAddress(inner.slot_no, inner.tx_index, inner.cert_index)
        elif isinstance(inner.value, ScriptCredential):
            staking_part = pc.ScriptHash(inner.value.credential_hash)
        else:
            staking_part = pc.VerificationKeyHash(inner.value.credential_hash)

    return pc.Address(payment_part=payment_part, staking_part=staking_part, network=network)


def stake_credential_of(address: Union[str, pc.Address, None]) -> Optional[StakePart]:
    """Staking part of any address (base, pointer or reward), or None"""
    if address is None:
        return None
    return parse_address(address).staking_part


def derive_contract_address(
    script_hash: str, network: pc.Network, delegation_address: Union[str, pc.Address, None]
) -> Optional[pc.Address]:
    """
    Derive the seller's contract address

    Payment is locked by the shared aftermarket script while staking rights
    stay with the seller.

    Args:
        script_hash: Aftermarket spending script hash as hex
        network: Network of the resulting address
        delegation_address: Seller's reward address

    Returns:
        Contract address, or None if the delegation address has no stake credential
    """
    staking_part = stake_credential_of(delegation_address)
    if staking_part is None:
        logger.warning(f"Reward address {delegation_address} has no stake credential.")
        return None

    return pc.Address(
        payment_part=pc.ScriptHash(bytes.fromhex(script_hash)),
        staking_part=staking_part,
        network=network,
    )
