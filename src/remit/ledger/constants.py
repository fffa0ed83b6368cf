# src/remit/ledger/constants.py
from __future__ import annotations

"""Genesis monetary constants for the REMIT token.

- Fixed max supply: 5,000,000 REMIT, divisible to 1e-18
- Six allocation pools minted over time under their own unlock schedules
- Staking rewards paid out of the stake-farm pool at a simple annual rate
"""

TOKEN_NAME: str = "Remit"
TOKEN_SYMBOL: str = "REMIT"

# Monetary precision (1 REMIT = 1e18 units)
TOKEN_DECIMALS: int = 18
UNIT: int = 10**TOKEN_DECIMALS

MAX_SUPPLY_REMIT: int = 5_000_000
MAX_SUPPLY: int = MAX_SUPPLY_REMIT * UNIT

# Minted straight to the owner at genesis, out of unallocated headroom.
INITIAL_SUPPLY: int = 1_000 * UNIT
OWNER_ACCOUNT_ID: str = "OWNER"

# Mint/burn events use this as their counterparty.
NULL_ACCOUNT: str = "0x0000000000000000000000000000000000000000"

HOUR: int = 60 * 60
DAY: int = 24 * HOUR
YEAR: int = 365 * DAY

# Pool names, in registry order
CIRCULATION = "circulation"
MARKETING = "marketing"
RESERVED = "reserved"
STAKE_FARM = "stake_farm"
DEV_FUND = "dev_fund"
TEAM_ADVISOR = "team_advisor"

POOL_NAMES = (CIRCULATION, MARKETING, RESERVED, STAKE_FARM, DEV_FUND, TEAM_ADVISOR)

CIRCULATION_ALLOCATION: int = 3_000_000 * UNIT
MARKETING_ALLOCATION: int = 100_000 * UNIT
RESERVED_ALLOCATION: int = 20_000 * UNIT
STAKE_FARM_ALLOCATION: int = 1_070_000 * UNIT

# Dev fund: 24,000 REMIT per 30 days after a 30 day cliff (24 steps)
DEV_FUND_ALLOCATION: int = 576_000 * UNIT
DEV_FUND_CLIFF_S: int = 30 * DAY
DEV_FUND_STEP: int = 24_000 * UNIT
DEV_FUND_INTERVAL_S: int = 30 * DAY

# Team/advisor: 1/12 of the allocation per 30 days after a 60 day cliff
TEAM_ADVISOR_ALLOCATION: int = 200_000 * UNIT
TEAM_ADVISOR_CLIFF_S: int = 60 * DAY
TEAM_ADVISOR_STEP: int = TEAM_ADVISOR_ALLOCATION // 12
TEAM_ADVISOR_INTERVAL_S: int = 30 * DAY

# Staking
STAKING_ENGINE_ADDRESS: str = "remit-staking"
REWARD_RATE_BPS: int = 1_000  # 10% per year, simple
BPS_DENOMINATOR: int = 10_000
WITHDRAW_CLIFF_S: int = 72 * HOUR
