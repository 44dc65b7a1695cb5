"""
Configuration schema and loader.

This module defines dataclasses for the simulator settings and for the
YAML configuration file (`config.yaml`) used by the command line.  The
helper `load_config()` reads a YAML file from disk and returns an
instance of `Config` populated with defaults for any missing fields,
while `Settings.from_dict()` accepts the camelCase JSON shape used by
front ends (``initialCapital``, ``useOBV`` and so on).

When extending the configuration, add new fields to the appropriate
dataclass, register any camelCase alias in `_SETTINGS_ALIASES` and
update `load_config()` accordingly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import yaml

from .assets import ASSET_PROFILES, AssetProfile, get_asset_profile
from ..errors import InvalidInput


TRADE_TYPES = ('long', 'short', 'both')


@dataclass
class CostsConfig:
    """Models trading costs.

    Attributes
    ----------
    use_order_fee : bool
        Charge `order_fee` when a position is opened and again when it
        is closed.
    order_fee : float
        Flat fee in account currency.
    use_spread : bool
        Model the bid/ask spread on entry and exit.
    spread_pips : float
        Spread in points; converted to price units with the asset's
        point value.
    """

    use_order_fee: bool = True
    order_fee: float = 7.0
    use_spread: bool = True
    spread_pips: float = 2.0


@dataclass
class SignalConfig:
    """Entry/exit filters.

    Attributes
    ----------
    use_obv : bool
        Use the cumulative volume-direction oscillator.
    obv_period : int
        Window length of the oscillator's recent/older means.
    use_heikin_ashi : bool
        Use the Heikin-Ashi trend filter (also enables signal exits).
    """

    use_obv: bool = True
    obv_period: int = 5
    use_heikin_ashi: bool = True


@dataclass
class Settings:
    """Parameters of one simulation run.

    Attributes
    ----------
    initial_capital : float
        Starting account balance.
    position_size : float
        Contract multiplier per trade.  Clamped to `max_position_size`.
    max_position_size : float
        Upper bound for `position_size`.
    stop_loss, take_profit : float
        Exit thresholds in points.
    trade_type : str
        ``long``, ``short`` or ``both``.
    asset : str
        Asset identifier used to look up the `AssetProfile`.
    costs : CostsConfig
        Fee and spread modelling.
    signals : SignalConfig
        Indicator filters.
    profiles : Mapping[str, AssetProfile]
        Asset table the profile is resolved from.
    """

    initial_capital: float = 2000.0
    position_size: float = 0.5
    max_position_size: float = 1.0
    stop_loss: float = 7000.0
    take_profit: float = 300.0
    trade_type: str = 'both'
    asset: str = 'silver'
    costs: CostsConfig = field(default_factory=CostsConfig)
    signals: SignalConfig = field(default_factory=SignalConfig)
    profiles: Mapping[str, AssetProfile] = field(default_factory=lambda: ASSET_PROFILES, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.position_size = min(self.position_size, self.max_position_size)

    @property
    def profile(self) -> AssetProfile:
        return get_asset_profile(self.asset, self.profiles)

    @property
    def trade_size(self) -> float:
        """Position size actually traded (re-clamped in case of later edits)."""
        return min(self.position_size, self.max_position_size)

    @property
    def fee(self) -> float:
        return float(self.costs.order_fee) if self.costs.use_order_fee else 0.0

    @property
    def spread_cost(self) -> float:
        """Spread in price units, 0 when spread modelling is off."""
        if not self.costs.use_spread:
            return 0.0
        return float(self.costs.spread_pips) * self.profile.point_value

    @property
    def can_long(self) -> bool:
        return self.trade_type in ('long', 'both')

    @property
    def can_short(self) -> bool:
        return self.trade_type in ('short', 'both')

    def validate(self) -> None:
        """Raise `InvalidInput` if the settings cannot drive a simulation."""
        if self.trade_type not in TRADE_TYPES:
            raise InvalidInput(f"trade_type must be one of {TRADE_TYPES}, got {self.trade_type!r}")
        if self.initial_capital <= 0:
            raise InvalidInput(f"initial_capital must be positive, got {self.initial_capital}")
        if self.trade_size <= 0:
            raise InvalidInput(f"position_size must be positive, got {self.position_size}")
        if self.stop_loss < 0 or self.take_profit < 0:
            raise InvalidInput("stop_loss and take_profit must not be negative")
        if self.costs.order_fee < 0 or self.costs.spread_pips < 0:
            raise InvalidInput("order_fee and spread_pips must not be negative")
        if int(self.signals.obv_period) < 1:
            raise InvalidInput(f"obv_period must be at least 1, got {self.signals.obv_period}")
        profile = self.profile
        if profile.point_value <= 0 or profile.contract_value <= 0:
            raise InvalidInput(f"asset {self.asset!r} has a non-positive point or contract value")

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> 'Settings':
        """Build settings from a flat or nested mapping.

        Both the camelCase keys of the JSON API and the dataclass field
        names are accepted.  Unknown keys are ignored.  The result is
        validated before it is returned.
        """
        values: Dict[str, Any] = {}
        costs: Dict[str, Any] = {}
        signals: Dict[str, Any] = {}
        for key, value in (raw or {}).items():
            if key in ('costs', 'signals') and isinstance(value, Mapping):
                target = costs if key == 'costs' else signals
                for sub_key, sub_value in value.items():
                    name = _SETTINGS_ALIASES.get(sub_key, (key, sub_key))[1]
                    target[name] = sub_value
                continue
            if key not in _SETTINGS_ALIASES:
                continue
            section, name = _SETTINGS_ALIASES[key]
            if section == 'costs':
                costs[name] = value
            elif section == 'signals':
                signals[name] = value
            else:
                values[name] = value

        try:
            settings = cls(
                initial_capital=float(values.get('initial_capital', 2000.0)),
                position_size=float(values.get('position_size', 0.5)),
                max_position_size=float(values.get('max_position_size', 1.0)),
                stop_loss=float(values.get('stop_loss', 7000.0)),
                take_profit=float(values.get('take_profit', 300.0)),
                trade_type=str(values.get('trade_type', 'both')).lower(),
                asset=str(values.get('asset', 'silver')).lower(),
                costs=CostsConfig(
                    use_order_fee=_as_bool(costs.get('use_order_fee', True), 'use_order_fee'),
                    order_fee=float(costs.get('order_fee', 7.0)),
                    use_spread=_as_bool(costs.get('use_spread', True), 'use_spread'),
                    spread_pips=float(costs.get('spread_pips', 2.0)),
                ),
                signals=SignalConfig(
                    use_obv=_as_bool(signals.get('use_obv', True), 'use_obv'),
                    obv_period=int(signals.get('obv_period', 5)),
                    use_heikin_ashi=_as_bool(signals.get('use_heikin_ashi', True), 'use_heikin_ashi'),
                ),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"malformed settings: {exc}") from exc
        settings.validate()
        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Render the settings with the camelCase keys of the JSON API."""
        return {
            'initialCapital': self.initial_capital,
            'positionSize': self.position_size,
            'maxPositionSize': self.max_position_size,
            'stopLoss': self.stop_loss,
            'takeProfit': self.take_profit,
            'tradeType': self.trade_type,
            'asset': self.asset,
            'useOrderFee': self.costs.use_order_fee,
            'orderFee': self.costs.order_fee,
            'useSpread': self.costs.use_spread,
            'spreadPips': self.costs.spread_pips,
            'useOBV': self.signals.use_obv,
            'obvPeriod': self.signals.obv_period,
            'useHeikinAshi': self.signals.use_heikin_ashi,
        }


def _as_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidInput(f"{name} must be true or false, got {value!r}")
    return value


# Maps every accepted key to (section, dataclass field name).
_SETTINGS_ALIASES: Dict[str, tuple] = {
    'initialCapital': ('settings', 'initial_capital'),
    'positionSize': ('settings', 'position_size'),
    'maxPositionSize': ('settings', 'max_position_size'),
    'stopLoss': ('settings', 'stop_loss'),
    'takeProfit': ('settings', 'take_profit'),
    'tradeType': ('settings', 'trade_type'),
    'asset': ('settings', 'asset'),
    'useOrderFee': ('costs', 'use_order_fee'),
    'orderFee': ('costs', 'order_fee'),
    'useSpread': ('costs', 'use_spread'),
    'spreadPips': ('costs', 'spread_pips'),
    'useOBV': ('signals', 'use_obv'),
    'obvPeriod': ('signals', 'obv_period'),
    'useHeikinAshi': ('signals', 'use_heikin_ashi'),
}
for _section, _name in list(_SETTINGS_ALIASES.values()):
    _SETTINGS_ALIASES[_name] = (_section, _name)


@dataclass
class DataConfig:
    """Candle source configuration.

    Attributes
    ----------
    source : str
        ``csv`` to read `{symbol}.csv` from `csv_dir`, ``synthetic`` to
        generate a seeded random walk.
    csv_dir : str
        Directory containing one CSV file per symbol.
    symbol : str
        File name stem of the CSV to load.
    bars : int
        Number of synthetic bars.
    interval : int
        Synthetic bar length in seconds.
    seed : int
        Random seed for synthetic data.
    """

    source: str = 'synthetic'
    csv_dir: str = 'data'
    symbol: str = 'silver'
    bars: int = 500
    interval: int = 3600
    seed: int = 42


@dataclass
class ReportConfig:
    """Where report artefacts are written."""

    out_dir: str = 'results'


@dataclass
class OptimizeConfig:
    """Parameter sweep configuration.

    Attributes
    ----------
    method : str
        ``random`` samples `iterations` combinations, ``grid`` runs the
        full cartesian product.
    metric : str
        Score used to rank runs (``totalGain``, ``winRate``,
        ``gainLossRatio`` or ``sharpe``).
    iterations : int
        Number of random samples.
    seed : int or None
        Random seed for sampling.
    processes : int
        Worker processes; 1 runs in-process.
    ranges : dict
        Parameter name (camelCase settings key) to
        ``{"min": ..., "max": ..., "step": ...}``.
    """

    method: str = 'random'
    metric: str = 'totalGain'
    iterations: int = 20
    seed: Optional[int] = None
    processes: int = 1
    ranges: Dict[str, Dict[str, float]] = field(default_factory=dict)


@dataclass
class Config:
    """Root configuration for the command line."""

    settings: Settings = field(default_factory=Settings)
    data: DataConfig = field(default_factory=DataConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    optimize: OptimizeConfig = field(default_factory=OptimizeConfig)


def _merge_dict(defaults: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries.

    The values in `override` take precedence over those in `defaults`.
    This helper is used when loading YAML into nested dataclasses.
    """
    result: Dict[str, Any] = defaults.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str) -> Config:
    """Load a configuration file from the given YAML path.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Config
        A populated configuration object.  Missing fields are filled with
        the defaults defined in the dataclasses.

    Raises
    ------
    InvalidInput
        If the `settings` section is malformed.
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw: Dict[str, Any] = yaml.safe_load(fh) or {}

    defaults: Dict[str, Any] = {
        'settings': Settings().to_dict(),
        'data': {
            'source': 'synthetic',
            'csv_dir': 'data',
            'symbol': 'silver',
            'bars': 500,
            'interval': 3600,
            'seed': 42,
        },
        'report': {
            'out_dir': 'results',
        },
        'optimize': {
            'method': 'random',
            'metric': 'totalGain',
            'iterations': 20,
            'seed': None,
            'processes': 1,
            'ranges': {},
        },
    }

    merged = _merge_dict(defaults, raw)

    data_cfg = DataConfig(**merged['data'])
    report_cfg = ReportConfig(**merged['report'])
    opt = merged['optimize']
    optimize_cfg = OptimizeConfig(
        method=str(opt.get('method', 'random')).lower(),
        metric=str(opt.get('metric', 'totalGain')),
        iterations=int(opt.get('iterations', 20)),
        seed=opt.get('seed'),
        processes=int(opt.get('processes', 1)),
        ranges=dict(opt.get('ranges') or {}),
    )

    return Config(
        settings=Settings.from_dict(merged['settings']),
        data=data_cfg,
        report=report_cfg,
        optimize=optimize_cfg,
    )
