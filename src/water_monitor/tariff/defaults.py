"""Default per-owner settings, seeded for every new owner.

Values are string-encoded to match how settings are stored and edited.
"""

from __future__ import annotations

DEFAULT_SETTINGS: dict[str, str] = {
    "water_basic_monthly_cost": "91.79",
    "water_block_1_limit": "6",
    "water_block_1_rate": "29.67",
    "water_block_2_limit": "15",
    "water_block_2_rate": "57.32",
    "water_block_3_limit": "25",
    "water_block_3_rate": "68.50",
    "water_block_4_limit": "35",
    "water_block_4_rate": "95.12",
    "water_block_5_rate": "133.43",
    "sewage_block_1_limit": "6",
    "sewage_block_1_rate": "22.25",
    "sewage_block_2_limit": "15",
    "sewage_block_2_rate": "42.99",
    "sewage_block_3_limit": "25",
    "sewage_block_3_rate": "51.38",
    "sewage_block_4_rate": "71.34",
    "billing_start_day": "1",
    "billing_end_day": "31",
}

WATER_BLOCK_COUNT = 5
SEWAGE_BLOCK_COUNT = 4
