from __future__ import annotations

import json
import os
import time

import httpx

from gauge_watch.ingest.reference import ReferenceData


ASSETS = {
    "assets": [
        {"base": "uosmo", "symbol": "OSMO"},
        {"coinMinimalDenom": "ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2", "symbol": "ATOM"},
        {"symbol": "broken"},
    ]
}
POOLS = {
    "pools": [
        {
            "id": "1",
            "pool_assets": [
                {"token": {"denom": "ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2", "amount": "1"}},
                {"token": {"denom": "uosmo", "amount": "1"}},
            ],
        },
        {"id": "1066", "token0": "uosmo", "token1": "ibc/UNKNOWNDENOMHASH"},
        {"id": "833", "pool_liquidity": [{"denom": "uosmo", "amount": "5"}]},
    ]
}


def make_reference(tmp_path, calls, ttl=3600, fail=False):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if fail:
            return httpx.Response(500)
        if request.url.path.endswith("assets"):
            return httpx.Response(200, json=ASSETS)
        return httpx.Response(200, json=POOLS)

    return ReferenceData(
        "https://ref.test/assets",
        "https://ref.test/pools",
        tmp_path,
        ttl_seconds=ttl,
        transport=httpx.MockTransport(handler),
    )


def test_resolves_assets_and_pools(tmp_path):
    calls = []
    reference = make_reference(tmp_path, calls)
    assert reference.resolve_asset_symbol("uosmo") == "OSMO"
    assert reference.resolve_asset_symbol("unknown") is None
    assert reference.resolve_pool_assets("833") == ["uosmo"]
    assert reference.resolve_pool_assets("999") is None
    assert reference.pool_symbols("1") == ["ATOM", "OSMO"]
    assert reference.pool_symbols("1066") == ["OSMO", "ibc/UNKNOW..."]
    assert calls == ["/assets", "/pools"]


def test_fresh_cache_is_not_refetched(tmp_path):
    calls = []
    make_reference(tmp_path, calls).resolve_asset_symbol("uosmo")
    make_reference(tmp_path, calls).resolve_asset_symbol("uosmo")
    assert calls == ["/assets"]


def test_expired_cache_is_refetched(tmp_path):
    calls = []
    make_reference(tmp_path, calls).resolve_asset_symbol("uosmo")
    stale = time.time() - 7200
    os.utime(tmp_path / "assetlist.json", (stale, stale))
    make_reference(tmp_path, calls).resolve_asset_symbol("uosmo")
    assert calls == ["/assets", "/assets"]


def test_failed_fetch_falls_back_to_stale_cache(tmp_path):
    (tmp_path / "assetlist.json").write_text(json.dumps(ASSETS), encoding="utf-8")
    stale = time.time() - 7200
    os.utime(tmp_path / "assetlist.json", (stale, stale))
    calls = []
    reference = make_reference(tmp_path, calls, fail=True)
    assert reference.resolve_asset_symbol("uosmo") == "OSMO"
    assert calls == ["/assets"]


def test_failed_fetch_without_cache_resolves_nothing(tmp_path):
    reference = make_reference(tmp_path, [], fail=True)
    assert reference.resolve_asset_symbol("uosmo") is None
    assert reference.pool_symbols("1") is None


def test_undecodable_cache_file_is_refetched(tmp_path):
    (tmp_path / "assetlist.json").write_bytes(b'{"assets": ["\xff\xfe"]}')
    calls = []
    reference = make_reference(tmp_path, calls)
    assert reference.resolve_asset_symbol("uosmo") == "OSMO"
    assert calls == ["/assets"]


def test_undecodable_cache_with_failed_fetch_resolves_nothing(tmp_path):
    (tmp_path / "pools.json").write_bytes(b"\xff\xfe\x00")
    reference = make_reference(tmp_path, [], fail=True)
    assert reference.pool_symbols("1") is None
