"""Gauge records as returned by the incentives REST endpoint."""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Coin(BaseModel):
    model_config = ConfigDict(extra="ignore")

    denom: str
    amount: str = "0"

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_str(cls, value: Any) -> str:
        return str(value)


class DistributeTo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    denom: str = ""
    duration: str
    lock_query_type: str | None = None


class Gauge(BaseModel):
    """Typed view over a raw gauge record.

    Integers arrive as strings from the API and are coerced here. Diffing
    always runs on the raw JSON; this model is only used by the classifier
    and formatter to read fields safely.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    is_perpetual: bool = False
    start_time: str = ""
    num_epochs_paid_over: int = Field(ge=0)
    filled_epochs: int = Field(ge=0)
    distribute_to: DistributeTo
    coins: List[Coin] = Field(default_factory=list)
    distributed_coins: List[Coin] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> str:
        if value is None or value == "":
            raise ValueError("gauge id is required")
        return str(value)

    @property
    def remaining_days(self) -> int:
        return self.num_epochs_paid_over - self.filled_epochs

    @property
    def first_coin_denom(self) -> str | None:
        return self.coins[0].denom if self.coins else None
