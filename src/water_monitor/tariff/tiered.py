"""Progressive block pricing for water and sewage."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from water_monitor.tariff.schema import TariffBlock, TariffConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostBreakdown:
    """Cost of a usage volume, unrounded."""

    water_basic: float = 0.0
    water_usage: float = 0.0
    sewage: float = 0.0
    total: float = 0.0

    def to_dict(self) -> dict[str, str]:
        return {
            "waterBasic": f"{self.water_basic:.2f}",
            "waterUsage": f"{self.water_usage:.2f}",
            "sewage": f"{self.sewage:.2f}",
            "total": f"{self.total:.2f}",
        }


def block_cost(usage_kl: float, blocks: Iterable[TariffBlock]) -> float:
    """Price *usage_kl* across cumulative blocks, cheapest first.

    A unit sitting exactly on a block limit is billed in that block.
    """
    cost = 0.0
    remaining = usage_kl
    previous_limit = 0.0

    for block in blocks:
        limit = math.inf if block.limit is None else block.limit
        in_block = min(remaining, limit - previous_limit)
        if in_block > 0:
            cost += in_block * block.rate
            remaining -= in_block
        previous_limit = limit
        if remaining <= 0:
            break

    return cost


def tiered_cost(usage_kl: float, tariff: TariffConfiguration) -> CostBreakdown:
    """Water basic charge + tiered water usage + tiered sewage for one volume.

    Water and sewage are priced independently over the same volume.
    """
    if usage_kl < 0:
        raise ValueError(f"usage must not be negative, got {usage_kl}")

    water_basic = tariff.water_basic_monthly_cost
    water_usage = block_cost(usage_kl, tariff.water_blocks)
    sewage = block_cost(usage_kl, tariff.sewage_blocks)

    logger.debug(
        "Tiered cost for %.4fkL: basic=%.2f water=%.2f sewage=%.2f",
        usage_kl, water_basic, water_usage, sewage,
    )
    return CostBreakdown(
        water_basic=water_basic,
        water_usage=water_usage,
        sewage=sewage,
        total=water_basic + water_usage + sewage,
    )
