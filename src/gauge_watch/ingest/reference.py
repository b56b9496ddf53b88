"""Slow-changing reference data (asset list, pool list) with a TTL file cache."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, List, Optional

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from gauge_watch.models.gauge import Coin


logger = logging.getLogger(__name__)


ASSET_CACHE_FILE = "assetlist.json"
POOL_CACHE_FILE = "pools.json"


class AssetRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    base: str = Field(validation_alias=AliasChoices("base", "coinMinimalDenom"))
    symbol: str


class PoolAsset(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: Coin


class PoolRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    pool_assets: List[PoolAsset] = Field(default_factory=list)
    pool_liquidity: List[Coin] = Field(default_factory=list)
    token0: Optional[str] = None
    token1: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> str:
        return str(value)

    def denoms(self) -> list[str]:
        if self.pool_assets:
            return [asset.token.denom for asset in self.pool_assets]
        if self.pool_liquidity:
            return [coin.denom for coin in self.pool_liquidity]
        return [denom for denom in (self.token0, self.token1) if denom]


class ReferenceData:
    """Resolve denoms to symbols and pools to their assets for display.

    Each list is cached in ``cache_dir`` and re-fetched only when the cache
    file is older than ``ttl_seconds``. A failed fetch falls back to the stale
    cache, then to nothing.
    """

    def __init__(
        self,
        asset_list_url: str,
        pool_list_url: str,
        cache_dir: str | Path,
        ttl_seconds: int = 86400,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.asset_list_url = asset_list_url
        self.pool_list_url = pool_list_url
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self.transport = transport
        self._assets: Optional[dict[str, str]] = None
        self._pools: Optional[dict[str, list[str]]] = None

    def resolve_asset_symbol(self, denom: str) -> Optional[str]:
        if self._assets is None:
            self._assets = self._load_assets()
        return self._assets.get(denom)

    def resolve_pool_assets(self, pool_id: str) -> Optional[list[str]]:
        if self._pools is None:
            self._pools = self._load_pools()
        return self._pools.get(str(pool_id))

    def pool_symbols(self, pool_id: str) -> Optional[list[str]]:
        denoms = self.resolve_pool_assets(pool_id)
        if not denoms:
            return None
        return [self.resolve_asset_symbol(denom) or _short_denom(denom) for denom in denoms]

    def _load_assets(self) -> dict[str, str]:
        payload = self._cached_json(ASSET_CACHE_FILE, self.asset_list_url)
        entries = payload.get("assets") if isinstance(payload, dict) else None
        assets: dict[str, str] = {}
        for entry in entries or []:
            try:
                record = AssetRecord.model_validate(entry)
            except ValidationError:
                continue
            assets[record.base] = record.symbol
        logger.debug("Loaded %d asset symbols.", len(assets))
        return assets

    def _load_pools(self) -> dict[str, list[str]]:
        payload = self._cached_json(POOL_CACHE_FILE, self.pool_list_url)
        entries = payload.get("pools") if isinstance(payload, dict) else None
        pools: dict[str, list[str]] = {}
        for entry in entries or []:
            try:
                record = PoolRecord.model_validate(entry)
            except ValidationError:
                continue
            pools[record.id] = record.denoms()
        logger.debug("Loaded %d pools.", len(pools))
        return pools

    def _cached_json(self, filename: str, url: str) -> Any:
        path = self.cache_dir / filename
        if self._is_fresh(path):
            cached = _read_json(path)
            if cached is not None:
                return cached
        if not url:
            return _read_json(path) or {}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Reference fetch from %s failed: %s", url, exc)
            return _read_json(path) or {}
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            logger.warning("Unable to cache %s: %s", path, exc)
        return payload

    def _is_fresh(self, path: Path) -> bool:
        try:
            age = time.time() - path.stat().st_mtime
        except OSError:
            return False
        return age <= self.ttl_seconds


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Unable to read %s: %s", path, exc)
        return None


def _short_denom(denom: str) -> str:
    if denom.startswith("ibc/") and len(denom) > 12:
        return denom[:10] + "..."
    return denom
