"""monero-wallet-cli adapter."""

from __future__ import annotations

import logging
from pathlib import Path

from solopool.errors import WalletCliError
from solopool.proc import Runner, run_command

log = logging.getLogger(__name__)

# Standard addresses: 95 base58 chars, leading 4 on mainnet, 5 on stagenet
MAINNET_ADDRESS = r"^4[0-9A-Za-z]{94}"
STAGENET_ADDRESS = r"^5[0-9A-Za-z]{94}"


class MoneroWalletCli:
    """Runs one-shot ``monero-wallet-cli --command ...`` invocations."""

    def __init__(
        self,
        binary: str | Path,
        wallet_file: str | Path,
        daemon_address: str,
        stagenet: bool = False,
        runner: Runner = run_command,
    ) -> None:
        self._binary = str(binary)
        self._wallet_file = Path(wallet_file)
        self._daemon_address = daemon_address
        self._stagenet = stagenet
        self._run = runner

    @property
    def address_pattern(self) -> str:
        return STAGENET_ADDRESS if self._stagenet else MAINNET_ADDRESS

    def _base(self) -> list[str]:
        args = [self._binary]
        if self._stagenet:
            args.append("--stagenet")
        return args

    def wallet_exists(self) -> bool:
        return self._wallet_file.is_file()

    async def create(self, password: str) -> None:
        self._wallet_file.parent.mkdir(parents=True, exist_ok=True)
        result = await self._run(
            self._base() + [
                "--daemon-address", self._daemon_address,
                "--generate-new-wallet", str(self._wallet_file),
                "--password", password,
                "--mnemonic-language", "English",
                "--command", "exit",
            ],
            timeout=120,
        )
        if not self._wallet_file.is_file():
            raise WalletCliError(
                f"failed to create wallet {self._wallet_file} "
                f"(exit {result.returncode}): {result.stderr.strip()}"
            )

    async def _wallet_command(self, command: str, password: str) -> str:
        result = await self._run(
            self._base() + [
                "--daemon-address", self._daemon_address,
                "--wallet-file", str(self._wallet_file),
                "--password", password,
                "--command", command,
            ],
            timeout=120,
        )
        if not result.ok:
            raise WalletCliError(f"monero-wallet-cli {command} exited {result.returncode}")
        return result.stdout

    async def export_seed(self, password: str) -> str:
        return await self._wallet_command("seed", password)

    async def get_address(self, password: str) -> str:
        return await self._wallet_command("address", password)
