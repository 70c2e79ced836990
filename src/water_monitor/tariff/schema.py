"""Typed tariff configuration parsed from an owner's string settings."""

from __future__ import annotations

import math
from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError, model_validator

from water_monitor.errors import ConfigurationError
from water_monitor.tariff.defaults import (
    DEFAULT_SETTINGS,
    SEWAGE_BLOCK_COUNT,
    WATER_BLOCK_COUNT,
)


class TariffBlock(BaseModel):
    """One pricing block. ``limit`` is a cumulative kL threshold; None = unbounded."""

    limit: float | None = Field(None, ge=0)
    rate: float = Field(ge=0)  # currency per kL


def _check_blocks(name: str, blocks: tuple[TariffBlock, ...], count: int) -> None:
    if len(blocks) != count:
        raise ValueError(f"{name} needs exactly {count} blocks, got {len(blocks)}")
    if blocks[-1].limit is not None:
        raise ValueError(f"last {name} block must be unbounded")
    # Limits may decrease; block_cost skips a block with no width.
    for i, block in enumerate(blocks[:-1], start=1):
        if block.limit is None:
            raise ValueError(f"{name} block {i} needs a limit")


class TariffConfiguration(BaseModel):
    """Water and sewage tariffs plus the recurring billing day range."""

    water_basic_monthly_cost: float = Field(ge=0)
    water_blocks: tuple[TariffBlock, ...]
    sewage_blocks: tuple[TariffBlock, ...]
    billing_start_day: int = Field(1, ge=1, le=31)
    billing_end_day: int = Field(31, ge=1, le=31)

    @model_validator(mode="after")
    def _blocks_are_complete(self) -> TariffConfiguration:
        _check_blocks("water", self.water_blocks, WATER_BLOCK_COUNT)
        _check_blocks("sewage", self.sewage_blocks, SEWAGE_BLOCK_COUNT)
        return self

    @classmethod
    def defaults(cls) -> TariffConfiguration:
        return cls.from_settings(DEFAULT_SETTINGS)

    @classmethod
    def from_settings(cls, settings: Mapping[str, object]) -> TariffConfiguration:
        """Parse a string-valued settings mapping.

        Absent keys (missing, None or blank) take the default table values,
        except ``water_block_5_rate`` which falls back to block 4's rate.
        Present but malformed values raise ConfigurationError.
        """

        def number(key: str) -> float | None:
            raw = settings.get(key)
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                return None
            try:
                value = float(raw)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Setting {key!r} must be numeric, got {raw!r}", key=key,
                ) from None
            if not math.isfinite(value):
                raise ConfigurationError(f"Setting {key!r} must be finite, got {raw!r}", key=key)
            if value < 0:
                raise ConfigurationError(f"Setting {key!r} must not be negative, got {raw!r}", key=key)
            return value

        def number_or_default(key: str) -> float:
            value = number(key)
            return float(DEFAULT_SETTINGS[key]) if value is None else value

        def day(key: str) -> int:
            raw = settings.get(key)
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                return int(DEFAULT_SETTINGS[key])
            try:
                parsed = float(str(raw).strip())
            except ValueError:
                parsed = math.nan
            # "20.0" is a day; "1.5" and "nan" are not.
            if not parsed.is_integer():
                raise ConfigurationError(
                    f"Setting {key!r} must be a whole day of month, got {raw!r}", key=key,
                )
            value = int(parsed)
            if not 1 <= value <= 31:
                raise ConfigurationError(f"Setting {key!r} must be within 1..31, got {value}", key=key)
            return value

        water = [
            TariffBlock(
                limit=number_or_default(f"water_block_{i}_limit"),
                rate=number_or_default(f"water_block_{i}_rate"),
            )
            for i in range(1, WATER_BLOCK_COUNT)
        ]
        top_rate = number(f"water_block_{WATER_BLOCK_COUNT}_rate")
        water.append(TariffBlock(limit=None, rate=water[-1].rate if top_rate is None else top_rate))

        sewage = [
            TariffBlock(
                limit=number_or_default(f"sewage_block_{i}_limit"),
                rate=number_or_default(f"sewage_block_{i}_rate"),
            )
            for i in range(1, SEWAGE_BLOCK_COUNT)
        ]
        sewage.append(TariffBlock(limit=None, rate=number_or_default(f"sewage_block_{SEWAGE_BLOCK_COUNT}_rate")))

        try:
            return cls(
                water_basic_monthly_cost=number_or_default("water_basic_monthly_cost"),
                water_blocks=tuple(water),
                sewage_blocks=tuple(sewage),
                billing_start_day=day("billing_start_day"),
                billing_end_day=day("billing_end_day"),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid tariff settings: {e}") from e
