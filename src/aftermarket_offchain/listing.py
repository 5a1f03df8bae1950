"""
Spot Listing Operations

Builds and submits the transaction that lists NFTs for a spot sale on the
aftermarket. The beacon mint and the locked sale output are always built
together, so a transaction can never carry one without the other.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pycardano as pc
from blockfrost import ApiError

from aftermarket_contracts.types import (
    MarketUTxOsRedeemer,
    SpotDatum,
    SpotPrice,
    create_close_or_update_redeemer,
)

from .addresses import derive_contract_address, parse_address, to_plutus_address
from .assets import AssetId, iter_unit_balances
from .beacons import beacon_mint, beacon_units
from .chain_context import ListingChain
from .config import DEFAULT_SALE_DEPOSIT, MarketplaceDeployment
from .errors import (
    AssetNotFound,
    ChainQueryFailed,
    InvalidListingInput,
    InvalidStateTransition,
    ListingError,
    MissingStakeCredential,
    ReferenceScriptMissing,
    SigningFailed,
    SubmissionRejected,
    TransactionBuildFailed,
    WalletQueryFailed,
)
from .fingerprint import fingerprint_of
from .wallet import ListingWallet

logger = logging.getLogger(__name__)

MAX_UINT64 = 2**64 - 1

# Failures raised by wallet and chain collaborators that are not already listing conditions
COLLABORATOR_ERRORS = (ApiError, OSError, pc.PyCardanoException)

Amount = Union[int, str]
PriceInput = Union[Amount, Mapping[str, Amount], SpotPrice]


class ListingState(str, Enum):
    """
    Listing attempt status

    Lifecycle:
    - IDLE -> OWNERSHIP_VERIFIED -> DATUM_BUILT -> REFERENCE_RESOLVED
      -> TX_BUILT -> SIGNED -> SUBMITTED
    - Any non-terminal state may move to FAILED
    """

    IDLE = "idle"
    OWNERSHIP_VERIFIED = "ownership_verified"
    DATUM_BUILT = "datum_built"
    REFERENCE_RESOLVED = "reference_resolved"
    TX_BUILT = "tx_built"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ListingState.SUBMITTED, ListingState.FAILED})

NEXT_STATE = {
    ListingState.IDLE: ListingState.OWNERSHIP_VERIFIED,
    ListingState.OWNERSHIP_VERIFIED: ListingState.DATUM_BUILT,
    ListingState.DATUM_BUILT: ListingState.REFERENCE_RESOLVED,
    ListingState.REFERENCE_RESOLVED: ListingState.TX_BUILT,
    ListingState.TX_BUILT: ListingState.SIGNED,
    ListingState.SIGNED: ListingState.SUBMITTED,
}


@dataclass(frozen=True)
class ListedNFT:
    """An NFT found in the wallet together with the UTxO holding it"""

    asset: AssetId
    fingerprint: str
    utxo: pc.UTxO


@dataclass(frozen=True)
class ListingPlan:
    """
    Instruction set of a listing transaction

    The reference script input, the beacon mint and the carrying output only
    ever enter a transaction builder together through apply_to.
    """

    reference_utxo: pc.UTxO
    mint: pc.MultiAsset
    redeemer: MarketUTxOsRedeemer
    output: pc.TransactionOutput

    def apply_to(self, builder: pc.TransactionBuilder) -> pc.TransactionBuilder:
        builder.reference_inputs.add(self.reference_utxo)
        builder.mint = self.mint
        builder.add_minting_script(self.reference_utxo, redeemer=pc.Redeemer(self.redeemer))
        builder.add_output(self.output)
        return builder


def build_listing_plan(
    reference_utxo: pc.UTxO,
    contract_address: pc.Address,
    deployment: MarketplaceDeployment,
    nfts: Sequence[ListedNFT],
    datum: SpotDatum,
    redeemer: MarketUTxOsRedeemer,
) -> ListingPlan:
    """
    Combine the beacon mint and the sale output into one plan

    The output holds the deposit, both freshly minted beacons and every
    listed NFT, with the datum attached inline.
    """
    mint = beacon_mint(deployment.beacon_policy_id, nfts[0].asset.policy_id_hex)

    output_assets = mint
    for nft in nfts:
        output_assets = output_assets.union(nft.asset.to_multi_asset(1))

    output = pc.TransactionOutput(
        address=contract_address,
        amount=pc.Value(coin=datum.sale_deposit, multi_asset=output_assets),
        datum=datum,
    )
    return ListingPlan(reference_utxo=reference_utxo, mint=mint, redeemer=redeemer, output=output)


def parse_amount(value: Any, label: str) -> int:
    """
    Validate a positive lovelace amount given as int or decimal string

    Raises:
        InvalidListingInput: If the amount is not a positive unsigned 64-bit integer
    """
    if isinstance(value, bool):
        raise InvalidListingInput(f"{label} must be numeric, got {value!r}")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        # str.isdigit alone accepts characters like "²" that int() rejects
        amount = int(value.strip())
    else:
        raise InvalidListingInput(f"{label} must be an integer amount of lovelace, got {value!r}")

    if amount <= 0:
        raise InvalidListingInput(f"{label} must be positive, got {amount}")
    if amount > MAX_UINT64:
        raise InvalidListingInput(f"{label} exceeds the maximum amount, got {amount}")
    return amount


def parse_price(price: Optional[Iterable[PriceInput]]) -> List[SpotPrice]:
    if price is None:
        raise InvalidListingInput("Sale price cannot be empty.")

    terms = []
    for index, term in enumerate(price):
        label = f"Price term {index}"
        if isinstance(term, SpotPrice):
            amount = term.amount
        elif isinstance(term, Mapping):
            if "amount" not in term:
                raise InvalidListingInput(f"{label} has no amount")
            amount = term["amount"]
        else:
            amount = term
        terms.append(SpotPrice(parse_amount(amount, label)))

    if not terms:
        raise InvalidListingInput("Sale price cannot be empty.")
    return terms


@dataclass
class ListingAttempt:
    """State and intermediate values of a single listing attempt"""

    state: ListingState = ListingState.IDLE
    history: List[ListingState] = field(default_factory=lambda: [ListingState.IDLE])
    nfts: List[ListedNFT] = field(default_factory=list)
    contract_address: Optional[pc.Address] = None
    datum: Optional[SpotDatum] = None
    redeemer: Optional[MarketUTxOsRedeemer] = None
    reference_utxo: Optional[pc.UTxO] = None
    plan: Optional[ListingPlan] = None
    transaction: Optional[pc.Transaction] = None
    tx_id: Optional[str] = None
    error: Optional[ListingError] = None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, state: ListingState) -> None:
        if self.finished or NEXT_STATE.get(self.state) != state:
            raise InvalidStateTransition(f"Cannot move listing from {self.state.value} to {state.value}")
        logger.info(f"Listing state: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, error: ListingError) -> None:
        if self.finished:
            raise InvalidStateTransition(f"Listing already {self.state.value}")
        logger.error(f"Listing failed in state {self.state.value}: {error}")
        self.error = error
        self.state = ListingState.FAILED
        self.history.append(ListingState.FAILED)


class SpotListingBuilder:
    """Lists NFTs for a spot sale on the aftermarket"""

    def __init__(
        self,
        deployment: MarketplaceDeployment,
        wallet: ListingWallet,
        chain: ListingChain,
    ):
        """
        Initialize the listing builder

        Args:
            deployment: Script hashes and references of the target network
            wallet: Wallet holding the NFTs, signs the transaction
            chain: Chain collaborator that resolves references and submits
        """
        self.deployment = deployment
        self.wallet = wallet
        self.chain = chain

    def find_nfts(self, fingerprints: Sequence[str], utxos: Iterable[pc.UTxO]) -> List[ListedNFT]:
        """
        Locate quantity-1 units whose fingerprint matches each request

        The first matching unit in UTxO order wins. Later distinct matches
        are ignored with a warning.

        Raises:
            AssetNotFound: If any fingerprint has no match
        """
        wanted = set(fingerprints)
        found: Dict[str, ListedNFT] = {}

        for balance in iter_unit_balances(utxos):
            if balance.quantity != 1:
                continue
            asset = AssetId.from_unit(balance.unit)
            result = fingerprint_of(asset)
            if result.is_degraded or result.value not in wanted:
                continue

            existing = found.get(result.value)
            if existing is None:
                found[result.value] = ListedNFT(asset, result.value, balance.utxo)
            elif existing.asset != asset:
                logger.warning(
                    f"Fingerprint {result.value} also matches unit {asset.unit}; "
                    f"keeping {existing.asset.unit}"
                )

        for fingerprint in fingerprints:
            if fingerprint not in found:
                raise AssetNotFound(fingerprint)

        return [found[fingerprint] for fingerprint in fingerprints]

    def prepare_listing(
        self,
        fingerprints: Sequence[str],
        seller_payment_address: Optional[str] = None,
        deposit: Amount = DEFAULT_SALE_DEPOSIT,
        price: Optional[Iterable[PriceInput]] = None,
    ) -> ListingAttempt:
        """
        Run a listing attempt up to an unsigned transaction

        Args:
            fingerprints: Fingerprints of the NFTs to list, all under one policy
            seller_payment_address: Where sale proceeds go, defaults to the wallet address
            deposit: Lovelace deposit locked with the listing
            price: Price terms in lovelace

        Returns:
            The attempt, either in TX_BUILT or FAILED
        """
        attempt = ListingAttempt()
        try:
            self._prepare(attempt, fingerprints, seller_payment_address, deposit, price)
        except ListingError as e:
            attempt.fail(e)
        return attempt

    def _prepare(
        self,
        attempt: ListingAttempt,
        fingerprints: Sequence[str],
        seller_payment_address: Optional[str],
        deposit: Amount,
        price: Optional[Iterable[PriceInput]],
    ) -> None:
        if not fingerprints:
            raise InvalidListingInput("NFTs array cannot be empty.")
        if isinstance(fingerprints, str):
            raise InvalidListingInput("Fingerprints must be given as a list")
        if len(set(fingerprints)) != len(fingerprints):
            raise InvalidListingInput("The same NFT cannot be listed twice")
        sale_deposit = parse_amount(deposit, "Deposit")
        sale_price = parse_price(price)

        # Idle -> OwnershipVerified
        try:
            utxos = self.wallet.get_utxos()
        except COLLABORATOR_ERRORS as e:
            raise WalletQueryFailed(f"Could not query wallet UTxOs: {e}") from e
        if not utxos:
            raise AssetNotFound(fingerprints[0])
        nfts = self.find_nfts(fingerprints, utxos)
        policy_ids = {nft.asset.policy_id for nft in nfts}
        if len(policy_ids) != 1:
            raise InvalidListingInput("All listed NFTs must share a single policy id")
        attempt.nfts = nfts
        attempt.advance(ListingState.OWNERSHIP_VERIFIED)

        # OwnershipVerified -> DatumBuilt
        if seller_payment_address is None:
            seller_payment_address = self.wallet.get_payment_address()
        payment_address = to_plutus_address(seller_payment_address)

        reward_address = self.wallet.get_reward_address()
        contract_address = derive_contract_address(
            self.deployment.aftermarket_script_hash, self.deployment.cardano_network, reward_address
        )
        if contract_address is None:
            raise MissingStakeCredential(reward_address)

        attempt.contract_address = contract_address
        attempt.datum = SpotDatum(
            beacon_id=bytes.fromhex(self.deployment.beacon_policy_id),
            aftermarket_observer_hash=bytes.fromhex(self.deployment.aftermarket_observer_hash),
            nft_policy_id=nfts[0].asset.policy_id,
            nft_names=[nft.asset.asset_name for nft in nfts],
            payment_address=payment_address,
            sale_deposit=sale_deposit,
            sale_price=sale_price,
        )
        attempt.redeemer = create_close_or_update_redeemer()
        logger.debug(f"Spot datum CBOR: {attempt.datum.to_cbor_hex()}")
        attempt.advance(ListingState.DATUM_BUILT)

        # DatumBuilt -> ReferenceResolved
        reference = self.deployment.beacon_script_reference
        try:
            reference_utxos = self.chain.resolve_outputs_by_reference(reference.tx_id, reference.output_index)
        except COLLABORATOR_ERRORS as e:
            raise ChainQueryFailed(f"Could not resolve reference script {reference}: {e}") from e
        if not reference_utxos or reference_utxos[0].output.script is None:
            raise ReferenceScriptMissing(reference.tx_id, reference.output_index)
        attempt.reference_utxo = reference_utxos[0]
        attempt.advance(ListingState.REFERENCE_RESOLVED)

        # ReferenceResolved -> TxBuilt
        attempt.plan = build_listing_plan(
            attempt.reference_utxo,
            contract_address,
            self.deployment,
            nfts,
            attempt.datum,
            attempt.redeemer,
        )
        attempt.transaction = self._build_transaction(attempt.plan, nfts)
        attempt.advance(ListingState.TX_BUILT)

    def _build_transaction(self, plan: ListingPlan, nfts: Sequence[ListedNFT]) -> pc.Transaction:
        """Balance the plan against the wallet's funds into an unsigned transaction"""
        wallet_address = parse_address(self.wallet.get_payment_address())

        builder = pc.TransactionBuilder(self.chain.get_context())
        nft_utxos: List[pc.UTxO] = []
        for nft in nfts:
            if nft.utxo not in nft_utxos:
                nft_utxos.append(nft.utxo)
                builder.add_input(nft.utxo)
        builder.add_input_address(wallet_address)
        plan.apply_to(builder)

        try:
            tx_body = builder.build(change_address=wallet_address)
        except (pc.PyCardanoException, ValueError) as e:
            raise TransactionBuildFailed(f"Could not build listing transaction: {e}") from e
        except (ApiError, OSError) as e:
            raise ChainQueryFailed(f"Chain query failed while building listing transaction: {e}") from e

        return pc.Transaction(tx_body, builder.build_witness_set())

    def submit_listing(self, attempt: ListingAttempt) -> ListingAttempt:
        """Sign a built attempt with the wallet and submit it"""
        try:
            try:
                attempt.transaction = self.wallet.sign_transaction(attempt.transaction)
            except COLLABORATOR_ERRORS as e:
                raise SigningFailed(f"Could not sign transaction: {e}") from e
            attempt.advance(ListingState.SIGNED)

            try:
                attempt.tx_id = self.chain.submit(attempt.transaction)
            except COLLABORATOR_ERRORS as e:
                raise SubmissionRejected(str(e)) from e
            attempt.advance(ListingState.SUBMITTED)
        except ListingError as e:
            attempt.fail(e)
        return attempt

    def list_for_sale(
        self,
        fingerprints: Sequence[str],
        seller_payment_address: Optional[str] = None,
        deposit: Amount = DEFAULT_SALE_DEPOSIT,
        price: Optional[Iterable[PriceInput]] = None,
    ) -> Dict[str, Any]:
        """
        List NFTs for a spot sale

        Args:
            fingerprints: Fingerprints of the NFTs to list, all under one policy
            seller_payment_address: Where sale proceeds go, defaults to the wallet address
            deposit: Lovelace deposit locked with the listing
            price: Price terms in lovelace

        Returns:
            Listing result dictionary
        """
        attempt = self.prepare_listing(fingerprints, seller_payment_address, deposit, price)
        if attempt.state == ListingState.TX_BUILT:
            self.submit_listing(attempt)
        return self.listing_result(attempt)

    def listing_result(self, attempt: ListingAttempt) -> Dict[str, Any]:
        if attempt.state != ListingState.SUBMITTED:
            return {
                "success": False,
                "state": attempt.state.value,
                "error": str(attempt.error) if attempt.error else "Listing not submitted",
                "error_code": attempt.error.code if attempt.error else None,
            }

        policy_beacon, spot_beacon = beacon_units(
            self.deployment.beacon_policy_id, attempt.nfts[0].asset.policy_id_hex
        )
        return {
            "success": True,
            "state": attempt.state.value,
            "message": "Transaction submitted successfully!",
            "tx_id": attempt.tx_id,
            "contract_address": str(attempt.contract_address),
            "policy_beacon": policy_beacon,
            "spot_beacon": spot_beacon,
            "fingerprints": [nft.fingerprint for nft in attempt.nfts],
            "explorer_url": self.chain.get_explorer_url(attempt.tx_id),
        }
