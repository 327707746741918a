import asyncio
import datetime
import logging
import os
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler

from bridger.errors import BridgerError, InsufficientFunds
from bridger.models import BridgeConfig, RunningMode, create_bridge_config
from bridger.models.bridge_config import get_evm_account_from_file, get_keypair_from_file
from bridger.settlement import BridgeSettlement, SettlementResult
from bridger.transfer import SolanaTransfer, TransferResult

app = typer.Typer()
console = Console()
logger = logging.getLogger("bridger")


@app.command()
def transfer(
    mode: RunningMode = typer.Argument(
        RunningMode.REAL, help="Modo de execução. 'dry' assina mas não envia."
    ),
    amount: int = typer.Option(1_000_000, help="Quantidade em minor units (1 USDC = 1_000_000)"),
    account1_key: Path = typer.Option(
        Path("sol-account2.key"), help="Chave privada Base58 da Account1"
    ),
    account2_key: Path = typer.Option(
        Path("sol-account1.key"), help="Chave privada Base58 da Account2"
    ),
):
    """
    Transfere USDC entre duas contas Solana. Envia quem tiver mais saldo.

    Exemplos:
        uv run python main.py transfer dry --amount 1000000
    """
    configure_logging(f"transfer-{mode}")
    config = create_bridge_config(amount, mode)
    _run(_transfer(config, account1_key, account2_key))


@app.command()
def bridge(
    mode: RunningMode = typer.Argument(
        RunningMode.REAL, help="Modo de execução. 'dry' assina mas não envia."
    ),
    amount: int = typer.Option(1_000_000, help="Quantidade em minor units (1 USDC = 1_000_000)"),
    sol_key: Path = typer.Option(
        Path("sol-account1.key"), help="Chave privada Base58 da conta Solana"
    ),
    eth_key: Path = typer.Option(
        Path("eth-account1.key"), help="Chave privada hex da conta EVM"
    ),
):
    """
    Faz a bridge de USDC entre Solana e Base pela LI.FI, no sentido da conta com mais saldo.

    Exemplos:
        uv run python main.py bridge real --amount 1000000 --sol-key sol.key --eth-key eth.key
    """
    configure_logging(f"bridge-{mode}")
    config = create_bridge_config(amount, mode)
    _run(_bridge(config, sol_key, eth_key))


async def _transfer(config: BridgeConfig, account1_key: Path, account2_key: Path):
    svc = SolanaTransfer(
        config,
        get_keypair_from_file(account1_key),
        get_keypair_from_file(account2_key),
    )
    logger.info(f"Iniciando transferência em {config.mode=}")
    try:
        result = await svc.run()
    finally:
        await svc.close()
    log_transfer(result)


async def _bridge(config: BridgeConfig, sol_key: Path, eth_key: Path):
    settlement = BridgeSettlement(
        config,
        get_keypair_from_file(sol_key),
        get_evm_account_from_file(eth_key),
    )
    logger.info(f"Iniciando bridge {settlement} em {config.mode=}")
    try:
        result = await settlement.run()
    finally:
        await settlement.close()
    log_settlement(result)


def _run(coro):
    try:
        asyncio.run(coro)
    except InsufficientFunds as ex:
        console.print(f"[yellow]Erro: o remetente não tem USDC suficiente.[/yellow] {ex}")
    except (BridgerError, httpx.HTTPError) as ex:
        logger.error(f"Erro: {ex}", exc_info=ex)
        raise typer.Exit(code=1)


def log_transfer(result: TransferResult):
    if result.created_token_account:
        console.print(f"Token account criada para [blue]{result.receiver}[/blue]")
    console.print(
        f"[bold green]Transferência concluída![/bold green] Assinatura: {result.signature}"
    )


def log_settlement(result: SettlementResult):
    if result.approval:
        console.print(f"Aprovação: {result.approval}")
    console.print(
        f"[bold green]Bridge enviada ({result.direction})![/bold green] Transação: {result.signature}"
    )


def configure_logging(filename):
    LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

    os.makedirs(".logs", exist_ok=True)
    fh = logging.FileHandler(
        f".logs/{filename}-{datetime.datetime.now().timestamp()}.log"
    )
    fh.setLevel(logging.DEBUG)
    ch = RichHandler()
    ch.setLevel(logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)
    fh.setFormatter(formatter)
    ch.setFormatter(logging.Formatter("%(name)s - %(message)s"))

    logging.basicConfig(level=logging.NOTSET, handlers=[fh, ch])


if __name__ == "__main__":
    app()
