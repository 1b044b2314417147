"""Wallet provisioning and wallet CLI adapters."""

from solopool.wallet.aleo import KeypairWalletProvisioner
from solopool.wallet.monero import MoneroWalletCli
from solopool.wallet.provisioner import WalletProvisioner
from solopool.wallet.tari import TariWalletCli

__all__ = [
    "KeypairWalletProvisioner",
    "MoneroWalletCli",
    "TariWalletCli",
    "WalletProvisioner",
]
