"""
Cardano Wallet Management

Pure wallet functionality without console dependencies.
Derives the seller's keys and addresses from a mnemonic and signs
listing transactions.
"""

from typing import List, Optional, Protocol

import pycardano as pc
from blockfrost import ApiError

from .errors import SigningFailed, WalletQueryFailed


class ListingWallet(Protocol):
    """Wallet collaborator used by the listing builder"""

    def get_utxos(self) -> List[pc.UTxO]:
        ...

    def get_payment_address(self) -> str:
        ...

    def get_reward_address(self) -> Optional[str]:
        ...

    def sign_transaction(self, tx: pc.Transaction) -> pc.Transaction:
        ...


class CardanoWallet:
    """HD wallet for the seller, derived from a BIP39 mnemonic"""

    def __init__(self, wallet_mnemonic: str, network: pc.Network, context: Optional[pc.ChainContext] = None):
        """
        Initialize wallet from mnemonic

        Args:
            wallet_mnemonic: BIP39 mnemonic phrase
            network: Cardano network of the derived addresses
            context: Chain context used to look up the wallet's UTxOs
        """
        self.cardano_network = network
        self.context = context

        self.wallet = pc.crypto.bip32.HDWallet.from_mnemonic(wallet_mnemonic)

        # Derive main keys
        self.payment_key = self.wallet.derive_from_path("m/1852'/1815'/0'/0/0")
        self.staking_key = self.wallet.derive_from_path("m/1852'/1815'/0'/2/0")

        self.payment_skey = pc.ExtendedSigningKey.from_hdwallet(self.payment_key)
        self.staking_skey = pc.ExtendedSigningKey.from_hdwallet(self.staking_key)

        self.payment_address = pc.Address(
            payment_part=self.payment_skey.to_verification_key().hash(),
            staking_part=self.staking_skey.to_verification_key().hash(),
            network=self.cardano_network,
        )

        self.reward_address = pc.Address(
            staking_part=self.staking_skey.to_verification_key().hash(),
            network=self.cardano_network,
        )

    def get_utxos(self) -> List[pc.UTxO]:
        if self.context is None:
            raise ValueError("Chain context required to query wallet UTxOs")
        try:
            return self.context.utxos(self.payment_address)
        except (ApiError, OSError, pc.PyCardanoException) as e:
            raise WalletQueryFailed(f"Could not query UTxOs of {self.payment_address}: {e}") from e

    def get_payment_address(self) -> str:
        return str(self.payment_address)

    def get_reward_address(self) -> Optional[str]:
        return str(self.reward_address)

    def sign_transaction(self, tx: pc.Transaction) -> pc.Transaction:
        """
        Add the payment key witness to a transaction

        Args:
            tx: Unsigned (or partially signed) transaction

        Returns:
            Transaction carrying this wallet's signature

        Raises:
            SigningFailed: If the transaction body cannot be hashed or signed
        """
        try:
            signature = self.payment_skey.sign(tx.transaction_body.hash())
        except pc.PyCardanoException as e:
            raise SigningFailed(f"Could not sign transaction: {e}") from e
        witness = pc.VerificationKeyWitness(self.payment_skey.to_verification_key(), signature)

        witness_set = tx.transaction_witness_set
        if witness_set.vkey_witnesses is None:
            witness_set.vkey_witnesses = []
        witness_set.vkey_witnesses.append(witness)

        return pc.Transaction(
            tx.transaction_body,
            witness_set,
            auxiliary_data=tx.auxiliary_data,
        )
