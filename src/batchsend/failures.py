import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

log = logging.getLogger("batchsend.failures")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(ts: datetime) -> str:
    """UTC ISO 8601 with millisecond precision and a trailing Z."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FailureRecorder:
    """Append-only journal of pairs that ended in failure.

    One line per entry: ``<timestamp>,<wallet_id>,<from>,<to>,<reason>``. The
    file is created on first write and never truncated. Write errors are
    logged and swallowed so a full disk cannot stop the batch.
    """

    def __init__(self, path: Path, *, clock: Callable[[], datetime] = utc_now):
        self.path = Path(path)
        self.clock = clock

    def record(self, wallet_id: str, from_address: str, to_address: str, reason: str) -> None:
        reason = " ".join(str(reason).splitlines())
        entry = f"{iso_timestamp(self.clock())},{wallet_id},{from_address},{to_address},{reason}\n"
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(entry)
            log.info("Recorded failed transfer in %s", self.path)
        except OSError as e:
            log.error("Could not record failed transfer for wallet %s in %s: %s", wallet_id, self.path, e)
