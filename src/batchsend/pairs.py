"""Loading transfer pairs and selecting them by wallet id."""

import logging
from collections.abc import Iterable
from pathlib import Path

from batchsend.errors import ConfigError
from batchsend.models import TransferPair

log = logging.getLogger("batchsend.pairs")


def parse_wallet_range(range_str: str | None) -> set[str] | None:
    """Parse a selector like ``"1-3,5,7-9"`` into a set of wallet ids.

    Each comma-separated token is either a single id or an inclusive integer
    range ``A-B``. Returns None for a missing or blank selector, meaning "no
    filtering".

    Raises:
        ConfigError: a range bound is not an integer.
    """
    if range_str is None or not range_str.strip():
        return None

    wallets: set[str] = set()
    for token in range_str.split(","):
        token = token.strip()
        if not token:
            continue
        if "-" in token:
            start_s, _, end_s = token.partition("-")
            try:
                start, end = int(start_s.strip()), int(end_s.strip())
            except ValueError as e:
                raise ConfigError(f"Invalid wallet range {token!r}") from e
            wallets.update(str(i) for i in range(start, end + 1))
        else:
            wallets.add(token)
    return wallets


def parse_pairs(lines: Iterable[str]) -> list[TransferPair]:
    pairs = []
    for line_no, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        fields = [f.strip() for f in line.split(",")]
        fields += [""] * (3 - len(fields))
        wallet_id, key_material, to_address = fields[:3]
        if not key_material or not to_address:
            # Don't echo the line, it carries key material.
            raise ConfigError(f"Invalid line format at line {line_no}: expected walletId,privateKey,toAddress")
        pairs.append(TransferPair(wallet_id=wallet_id, key_material=key_material, to_address=to_address))
    return pairs


def load_pairs(path: Path) -> list[TransferPair]:
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"{path} does not exist!")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e
    return parse_pairs(text.splitlines())


def select_pairs(pairs: Iterable[TransferPair], selected: set[str] | None) -> list[TransferPair]:
    if selected is None:
        return list(pairs)
    return [p for p in pairs if p.wallet_id in selected]
