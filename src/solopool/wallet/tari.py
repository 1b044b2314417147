"""minotari_console_wallet adapter."""

from __future__ import annotations

import logging
from pathlib import Path

from solopool.errors import WalletCliError
from solopool.proc import Runner, run_command

log = logging.getLogger(__name__)

# get-address prints the hex-encoded address first
ADDRESS_PATTERN = r"^[a-f0-9]{64}"


class TariWalletCli:
    """Runs ``minotari_console_wallet --non-interactive --command ...``."""

    address_pattern = ADDRESS_PATTERN

    def __init__(
        self,
        binary: str | Path,
        config_file: str | Path,
        data_dir: str | Path,
        network: str = "mainnet",
        runner: Runner = run_command,
    ) -> None:
        self._binary = str(binary)
        self._config = str(config_file)
        self._data_dir = Path(data_dir)
        self._network = network
        self._run = runner

    def wallet_exists(self) -> bool:
        return self._data_dir.is_dir() and any(self._data_dir.iterdir())

    async def _command(self, command: str, password: str):
        return await self._run(
            [
                self._binary,
                "--config", self._config,
                "--password", password,
                "--network", self._network,
                "--non-interactive",
                "--command", command,
            ],
            timeout=180,
        )

    async def create(self, password: str) -> None:
        # The console wallet creates its database on first use of any command
        result = await self._command("get-balance", password)
        if not self.wallet_exists():
            raise WalletCliError(
                f"wallet database not created in {self._data_dir} "
                f"(exit {result.returncode}): {result.stderr.strip()}"
            )

    async def export_seed(self, password: str) -> str:
        result = await self._command("export-seed-words", password)
        if not result.ok:
            raise WalletCliError(f"export-seed-words exited {result.returncode}")
        return result.stdout

    async def get_address(self, password: str) -> str:
        result = await self._command("get-address", password)
        if not result.ok:
            raise WalletCliError(f"get-address exited {result.returncode}")
        return result.stdout
