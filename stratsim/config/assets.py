"""
Per-asset conversion constants.

Each tradeable asset has a point value (the price distance of one
"point", used to turn stop-loss, take-profit and spread settings into
price units) and a contract value (the multiplier turning a price delta
into money).  The table is read-only; the engine receives the resolved
profile through its settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class AssetProfile:
    """Conversion constants for one asset.

    Attributes
    ----------
    point_value : float
        Price distance of one point.
    contract_value : float
        Money per unit of price movement for a position size of 1.
    """

    point_value: float
    contract_value: float


DEFAULT_PROFILE = AssetProfile(point_value=0.01, contract_value=1000.0)

ASSET_PROFILES: Mapping[str, AssetProfile] = MappingProxyType({
    'silver': AssetProfile(point_value=0.001, contract_value=5000.0),
    'gold': AssetProfile(point_value=0.01, contract_value=100.0),
    'copper': AssetProfile(point_value=0.0005, contract_value=25000.0),
    'oil': AssetProfile(point_value=0.01, contract_value=1000.0),
    'natgas': AssetProfile(point_value=0.001, contract_value=10000.0),
    'eurusd': AssetProfile(point_value=0.0001, contract_value=100000.0),
    'gbpusd': AssetProfile(point_value=0.0001, contract_value=100000.0),
    'usdjpy': AssetProfile(point_value=0.01, contract_value=1000.0),
    'spx500': AssetProfile(point_value=0.1, contract_value=50.0),
    'dax': AssetProfile(point_value=1.0, contract_value=25.0),
    'ftse': AssetProfile(point_value=1.0, contract_value=10.0),
})


def get_asset_profile(asset: str, profiles: Mapping[str, AssetProfile] = ASSET_PROFILES) -> AssetProfile:
    """Return the profile for ``asset``, falling back to :data:`DEFAULT_PROFILE`.

    Lookup is case-insensitive.  An unknown asset is not an error.
    """
    return profiles.get(str(asset).lower(), DEFAULT_PROFILE)
