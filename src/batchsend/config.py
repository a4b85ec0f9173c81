import tomllib
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, PositiveFloat, PositiveInt, ValidationError, model_validator

from batchsend.errors import ConfigError

pkg_root = Path(__file__).parent
config_file = pkg_root / "config.toml"


class FilesCfg(BaseModel):
    pairs: Path = Path("transfer_pairs.txt")
    failure_log: Path = Path("single_failed_transactions.txt")
    failed_wallets_prefix: str = "failed_wallets_"
    log: Path = Path("logs/batchsend.log")


class SubmitCfg(BaseModel):
    max_attempts: PositiveInt = 5
    retry_delay: float = 3.0
    gas_limit: PositiveInt = 21000
    gas_price_gwei: Decimal = Decimal("2.5")
    receipt_timeout: PositiveFloat = 120.0


class ThrottleCfg(BaseModel):
    amount_min_gwei: PositiveInt = 10
    amount_max_gwei: PositiveInt = 10000
    delay_min: int = 60
    delay_max: int = 360

    @model_validator(mode="after")
    def _ordered(self) -> "ThrottleCfg":
        if self.amount_min_gwei > self.amount_max_gwei:
            raise ValueError("amount_min_gwei must not exceed amount_max_gwei")
        if not 0 <= self.delay_min <= self.delay_max:
            raise ValueError("need 0 <= delay_min <= delay_max")
        return self


class BalanceCfg(BaseModel):
    min_ether: Decimal = Decimal("0.0000001")


class Settings(BaseModel):
    files: FilesCfg = FilesCfg()
    submit: SubmitCfg = SubmitCfg()
    throttle: ThrottleCfg = ThrottleCfg()
    balance: BalanceCfg = BalanceCfg()


def load_settings(path: Path = config_file) -> Settings:
    """Parse and validate a TOML settings file.

    Raises:
        ConfigError: the file is missing, is not valid TOML, or fails validation.
    """
    try:
        raw = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        return Settings.model_validate(raw)
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
        raise ConfigError(f"Bad settings file {path}: {e}") from e


settings = load_settings()
