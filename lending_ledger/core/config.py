"""Configuration loading utilities for YAML-based ledger settings."""

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..common.risk_math import (
    DEFAULT_INTEREST_RATE_PERCENT,
    LIQUIDATION_THRESHOLD_PERCENT,
    MAX_ACTIVE_LOANS_PER_USER,
    MINIMUM_COLLATERAL_RATIO_PERCENT,
    SECONDS_PER_TICK,
    TICKS_PER_DAY,
)
from ..models.parameters import RiskParameters
from .logging_config import get_logger


logger = get_logger(__name__)
_BASE_DIR = Path(__file__).resolve().parent.parent
_CONFIG_PATH = _BASE_DIR / "config.yml"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class AppSettings:
    """Ledger settings loaded from YAML configuration file."""

    app_name: str = "Lending Ledger"
    log_level: str = "INFO"
    platform_initialized: bool = False
    minimum_collateral_ratio_percent: int = MINIMUM_COLLATERAL_RATIO_PERCENT
    liquidation_threshold_percent: int = LIQUIDATION_THRESHOLD_PERCENT
    default_interest_rate_percent: int = DEFAULT_INTEREST_RATE_PERCENT
    ticks_per_day: int = TICKS_PER_DAY
    collateral_asset: str = "BTC"
    collateral_decimals: int = 8
    allow_partial_repayment: bool = False
    max_active_loans_per_user: int = MAX_ACTIVE_LOANS_PER_USER
    authorized_agents: list[str] = field(default_factory=list)
    oracle_mode: str = "static"
    oracle_static_prices: Dict[str, int] = field(default_factory=dict)
    oracle_rpc_url: Optional[str] = None
    oracle_contract_address: Optional[str] = None
    oracle_contract_abi_json: str = "[]"
    oracle_price_function: str = "getPrice"
    oracle_pass_asset: bool = False
    poller_enabled: bool = False
    poller_interval_sec: int = 60
    clock_genesis_epoch: int = 0
    clock_seconds_per_tick: int = SECONDS_PER_TICK

    def risk_parameters(self) -> RiskParameters:
        """Build the validated parameter snapshot handed to the lifecycle manager."""
        return RiskParameters(
            platform_initialized=self.platform_initialized,
            minimum_collateral_ratio_percent=self.minimum_collateral_ratio_percent,
            liquidation_threshold_percent=self.liquidation_threshold_percent,
            default_interest_rate_percent=self.default_interest_rate_percent,
            ticks_per_day=self.ticks_per_day,
            collateral_asset=self.collateral_asset,
            collateral_decimals=self.collateral_decimals,
            allow_partial_repayment=self.allow_partial_repayment,
        )


def _to_bool(value: Any, default: bool = False) -> bool:
    """Convert value to bool with a default fallback."""
    try:
        if isinstance(value, bool):
            return value
        return value.strip().lower() in {"1", "true", "yes", "on"}
    except (AttributeError, ValueError):
        logger.warning("Invalid boolean value '%s'. Using default=%s", value, default)
        return default


def _to_int(value: Any, default: int) -> int:
    """Convert value to int with a default fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer value '%s'. Using default=%s", value, default)
        return default


def _to_list(value: Any) -> list[str]:
    """Convert list-like or comma-separated value to list[str]."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _to_price_map(value: Any) -> Dict[str, int]:
    """Convert a mapping of asset symbol to integer price, skipping bad entries."""
    if not isinstance(value, dict):
        if value is not None:
            logger.warning("Invalid static price table '%s'. Ignoring.", value)
        return {}
    prices: Dict[str, int] = {}
    for asset, raw_price in value.items():
        try:
            prices[str(asset).upper()] = int(raw_price)
        except (TypeError, ValueError):
            logger.warning("Invalid static price asset=%s value='%s'. Skipping.", asset, raw_price)
    return prices


def _to_json_string(value: Any, default: str = "[]") -> str:
    """Convert value into JSON string for ABI compatibility."""
    if value is None:
        return default
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        logger.exception("Failed to serialize value as JSON string.")
        return default


def _read_config(path: Optional[PathLike] = None) -> dict:
    """Read and parse YAML configuration."""
    config_path = Path(path) if path is not None else _CONFIG_PATH
    try:
        with config_path.open("r", encoding="utf-8") as config_file:
            config_data = yaml.safe_load(config_file) or {}
        logger.info("Configuration loaded from %s", config_path)
        return config_data
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Falling back to defaults.", config_path)
        return {}
    except yaml.YAMLError:
        logger.exception("Failed to parse config file at %s", config_path)
        return {}


def load_settings(path: Optional[PathLike] = None) -> AppSettings:
    """Load ledger settings from `config.yml`, or from *path* when given."""
    config = _read_config(path)
    app_cfg = config.get("app", {}) or {}
    risk_cfg = config.get("risk", {}) or {}
    oracle_cfg = config.get("oracle", {}) or {}
    poller_cfg = config.get("poller", {}) or {}
    clock_cfg = config.get("clock", {}) or {}
    defaults = AppSettings()

    return AppSettings(
        app_name=str(app_cfg.get("name", defaults.app_name)),
        log_level=str(app_cfg.get("log_level", defaults.log_level)).upper(),
        platform_initialized=_to_bool(risk_cfg.get("platform_initialized", False), False),
        minimum_collateral_ratio_percent=_to_int(
            risk_cfg.get("minimum_collateral_ratio_percent", defaults.minimum_collateral_ratio_percent),
            defaults.minimum_collateral_ratio_percent,
        ),
        liquidation_threshold_percent=_to_int(
            risk_cfg.get("liquidation_threshold_percent", defaults.liquidation_threshold_percent),
            defaults.liquidation_threshold_percent,
        ),
        default_interest_rate_percent=_to_int(
            risk_cfg.get("default_interest_rate_percent", defaults.default_interest_rate_percent),
            defaults.default_interest_rate_percent,
        ),
        ticks_per_day=_to_int(risk_cfg.get("ticks_per_day", defaults.ticks_per_day), defaults.ticks_per_day),
        collateral_asset=str(risk_cfg.get("collateral_asset", defaults.collateral_asset)).upper(),
        collateral_decimals=_to_int(
            risk_cfg.get("collateral_decimals", defaults.collateral_decimals),
            defaults.collateral_decimals,
        ),
        allow_partial_repayment=_to_bool(risk_cfg.get("allow_partial_repayment", False), False),
        max_active_loans_per_user=_to_int(
            risk_cfg.get("max_active_loans_per_user", defaults.max_active_loans_per_user),
            defaults.max_active_loans_per_user,
        ),
        authorized_agents=_to_list(risk_cfg.get("authorized_agents", [])),
        oracle_mode=str(oracle_cfg.get("mode", defaults.oracle_mode)).strip().lower(),
        oracle_static_prices=_to_price_map(oracle_cfg.get("static_prices")),
        oracle_rpc_url=oracle_cfg.get("rpc_url"),
        oracle_contract_address=oracle_cfg.get("contract_address"),
        oracle_contract_abi_json=_to_json_string(oracle_cfg.get("contract_abi_json"), default="[]"),
        oracle_price_function=str(oracle_cfg.get("price_function", defaults.oracle_price_function)),
        oracle_pass_asset=_to_bool(oracle_cfg.get("pass_asset", False), False),
        poller_enabled=_to_bool(poller_cfg.get("enabled", False), False),
        poller_interval_sec=_to_int(
            poller_cfg.get("interval_sec", defaults.poller_interval_sec),
            defaults.poller_interval_sec,
        ),
        clock_genesis_epoch=_to_int(clock_cfg.get("genesis_epoch", 0), 0),
        clock_seconds_per_tick=_to_int(
            clock_cfg.get("seconds_per_tick", defaults.clock_seconds_per_tick),
            defaults.clock_seconds_per_tick,
        ),
    )
