# tests/test_api_routes.py
from __future__ import annotations

from dataclasses import replace

from fastapi.testclient import TestClient

from remit.api.app import create_app
from remit.ledger.constants import DAY, HOUR, OWNER_ACCOUNT_ID, UNIT
from remit.runtime.system import TokenSystem
from remit.runtime.token_config import default_token_config

T0 = 1_700_000_000


def _client(mode: str = "dev") -> tuple[TestClient, TokenSystem]:
    system = TokenSystem(replace(default_token_config(), mode=mode), genesis_time=T0)
    return TestClient(create_app(system=system)), system


def test_health_reports_mode_and_ledger_time() -> None:
    c, _ = _client()
    r = c.get("/v1/health")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["mode"] == "dev"
    assert body["symbol"] == "REMIT"
    assert body["ledger_time"] == T0
    assert body["ready"] is True
    assert r.headers.get("x-request-id")


def test_health_without_system_is_not_ready() -> None:
    c = TestClient(create_app(boot_runtime=False))
    body = c.get("/v1/health").json()
    assert body["ok"] is True
    assert body["ready"] is False

    r = c.get("/v1/token")
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "not_ready"


def test_token_metadata() -> None:
    c, _ = _client()
    body = c.get("/v1/token").json()
    assert body["name"] == "Remit"
    assert body["symbol"] == "REMIT"
    assert body["decimals"] == 18
    assert body["total_supply"] == 1_000 * UNIT
    assert body["max_supply"] == 5_000_000 * UNIT


def test_transfer_approve_and_transfer_from() -> None:
    c, system = _client()

    r = c.post("/v1/transfer", json={"from": OWNER_ACCOUNT_ID, "to": "alice", "amount": 10 * UNIT})
    assert r.status_code == 200
    assert r.json()["events"][0]["event"] == "Transfer"

    r = c.post("/v1/approve", json={"owner": "alice", "spender": "bob", "amount": 4 * UNIT})
    assert r.status_code == 200
    assert c.get("/v1/accounts/alice/allowances/bob").json()["allowance"] == 4 * UNIT

    r = c.post("/v1/transfer_from", json={"spender": "bob", "from": "alice", "to": "carol", "amount": 3 * UNIT})
    assert r.status_code == 200
    assert system.balance_of("carol") == 3 * UNIT
    assert c.get("/v1/accounts/alice").json()["balance"] == 7 * UNIT
    assert c.get("/v1/accounts/alice/allowances/bob").json()["allowance"] == UNIT


def test_ledger_rejection_maps_to_400_error_body() -> None:
    c, _ = _client()
    r = c.post("/v1/transfer", json={"from": "nobody", "to": "alice", "amount": 1})
    assert r.status_code == 400
    body = r.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "insufficient_balance"


def test_negative_amount_fails_schema_validation() -> None:
    c, _ = _client()
    r = c.post("/v1/transfer", json={"from": OWNER_ACCOUNT_ID, "to": "alice", "amount": -1})
    assert r.status_code == 422


def test_pool_listing_and_mint_with_client_clock() -> None:
    c, system = _client()

    pools = c.get("/v1/pools", params={"now": T0}).json()
    assert pools["staking_engine"] == system.staking_address
    assert [p["pool"] for p in pools["pools"]] == system.pool_names()

    dev = c.get("/v1/pools/dev_fund", params={"now": T0 + 31 * DAY}).json()
    assert dev["available"] == 24_000 * UNIT

    r = c.post("/v1/pools/dev_fund/mint", json={"to": "dev", "amount": 10_000 * UNIT, "now": T0 + 33 * DAY})
    assert r.status_code == 200
    assert r.json()["remaining"] == 566_000 * UNIT
    assert system.now == T0 + 33 * DAY


def test_locked_pool_is_400() -> None:
    c, _ = _client()
    r = c.post("/v1/pools/team_advisor/mint", json={"to": "t", "amount": UNIT, "now": T0 + DAY})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "pool_locked"


def test_unknown_pool_is_404() -> None:
    c, _ = _client()
    assert c.get("/v1/pools/nope", params={"now": T0}).status_code == 404
    r = c.post("/v1/pools/nope/mint", json={"to": "a", "amount": 1, "now": T0})
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "unknown_pool"


def test_stake_farm_mint_from_wrong_caller_is_403() -> None:
    c, _ = _client()
    r = c.post("/v1/pools/stake_farm/mint", json={"to": "a", "amount": UNIT, "caller": "acct9", "now": T0})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "caller_not_staking_engine"


def test_prod_mode_refuses_client_clock() -> None:
    c, _ = _client(mode="prod")
    r = c.post("/v1/pools/circulation/mint", json={"to": "a", "amount": UNIT, "now": T0})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "client_clock_forbidden"

    # Without `now` the node clock is used.
    r = c.post("/v1/pools/circulation/mint", json={"to": "a", "amount": UNIT})
    assert r.status_code == 200


def test_staking_deposit_and_withdraw_over_http() -> None:
    c, system = _client()
    addr = system.staking_address

    c.post("/v1/transfer", json={"from": OWNER_ACCOUNT_ID, "to": "staker", "amount": 60 * UNIT})
    c.post("/v1/approve", json={"owner": "staker", "spender": addr, "amount": 60 * UNIT})

    r = c.post("/v1/staking/deposit", json={"staker": "staker", "amount": 20 * UNIT, "now": T0})
    assert r.status_code == 200
    assert r.json()["opened"] is True

    summary = c.get("/v1/staking").json()
    assert summary["number_of_holders"] == 1
    assert summary["registered"] is True
    assert summary["holders"] == ["staker"]

    pos = c.get("/v1/staking/staker", params={"now": T0 + 10 * HOUR}).json()
    assert pos["position"]["deposited_tokens"] == 20 * UNIT
    assert pos["pending_rewards"] == system.pending_rewards("staker", T0 + 10 * HOUR)

    r = c.post("/v1/staking/withdraw", json={"staker": "staker", "amount": 20 * UNIT, "now": T0 + 10 * HOUR})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "cliff_not_elapsed"

    r = c.post("/v1/staking/withdraw", json={"staker": "staker", "amount": 20 * UNIT, "now": T0 + 72 * HOUR})
    assert r.status_code == 200
    body = r.json()
    assert body["closed"] is True
    assert any(e["event"] == "RewardsTransferred" for e in body["events"])
    assert c.get("/v1/staking").json()["number_of_holders"] == 0


def test_clock_regression_over_http_is_400() -> None:
    c, _ = _client()
    c.post("/v1/pools/circulation/mint", json={"to": "a", "amount": UNIT, "now": T0 + 100})
    r = c.post("/v1/pools/circulation/mint", json={"to": "a", "amount": UNIT, "now": T0 + 1})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "invalid_time"


def test_prod_mode_refuses_body_caller_for_stake_farm() -> None:
    c, system = _client(mode="prod")
    before = system.pool_remaining("stake_farm")

    r = c.post(
        "/v1/pools/stake_farm/mint",
        json={"to": "mallory", "amount": 10_000 * UNIT, "caller": system.staking_address},
    )
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "caller_not_staking_engine"
    assert system.pool_remaining("stake_farm") == before
    assert system.balance_of("mallory") == 0

    # No caller at all still hits the pool's engine gate.
    r = c.post("/v1/pools/stake_farm/mint", json={"to": "mallory", "amount": UNIT})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "caller_not_staking_engine"
