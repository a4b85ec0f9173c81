import argparse
import asyncio
import logging
from pathlib import Path

import web3

import batchsend.constants as C
from batchsend.config import Settings, settings as default_settings
from batchsend.errors import ConfigError
from batchsend.ledger import Web3Ledger
from batchsend.logging_config import setup_logging
from batchsend.models import BatchResult
from batchsend.orchestrator import BatchOrchestrator

log = logging.getLogger("batchsend.cli")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="batchsend",
        description="Send one randomized, throttled transfer per (key, destination) pair.",
    )
    parser.add_argument("wallets",
                        nargs="?",
                        default=None,
                        help='Wallet ids to process, e.g. "1-5", "1,3,5" or "1-3,5,7-9". Default: all.',
                        )
    parser.add_argument("-f", "--pairs-file",
                        type=Path,
                        default=None,
                        help="Pairs file (walletId,privateKey,toAddress per line).",
                        )
    return parser.parse_args(argv)


async def run(args, s: Settings) -> BatchResult:
    ledger = Web3Ledger(C.RPC_URL, receipt_timeout=s.submit.receipt_timeout)
    try:
        orchestrator = BatchOrchestrator(ledger, s)
        pairs = orchestrator.load(args.pairs_file or s.files.pairs, args.wallets)
        return await orchestrator.run(pairs)
    finally:
        await ledger.close()


def main(argv=None) -> int:
    args = parse_args(argv)
    s = default_settings
    setup_logging(s.files.log)

    log.info("Script started")
    log.info("web3.py version: %s", web3.__version__)
    log.info("Connecting to: %s", C.RPC_URL)

    try:
        asyncio.run(run(args, s))
    except ConfigError as e:
        log.error("Error: %s", e)
        return 1
    except Exception:
        log.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
