"""Pydantic models for the subset of the Open Hand History schema the converter reads."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _id_to_str(value: Any) -> Any:
    # Producers disagree on whether ids are numbers or strings.
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return str(value)
    return value


class OhhModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class BetLimitModel(OhhModel):
    bet_type: Optional[str] = None
    bet_cap: Optional[Decimal] = None


class PlayerModel(OhhModel):
    id: str
    seat: int
    name: str
    display: Optional[str] = None
    starting_stack: Decimal

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _id_to_str(value)


class ActionModel(OhhModel):
    action_number: Optional[int] = None
    player_id: Optional[str] = None
    action: str
    amount: Optional[Decimal] = None
    is_allin: Optional[bool] = None
    cards: Optional[List[str]] = None

    @field_validator("player_id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _id_to_str(value)


class RoundModel(OhhModel):
    id: int = 0
    street: str
    cards: List[str] = Field(default_factory=list)
    actions: List[ActionModel] = Field(default_factory=list)


class PlayerWinModel(OhhModel):
    player_id: str
    win_amount: Decimal
    contributed_rake: Optional[Decimal] = None

    @field_validator("player_id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _id_to_str(value)


class PotModel(OhhModel):
    number: int = 0
    amount: Decimal = Decimal("0")
    rake: Decimal = Decimal("0")
    jackpot: Optional[Decimal] = None
    player_wins: List[PlayerWinModel] = Field(default_factory=list)


class OhhHandModel(OhhModel):
    spec_version: Optional[str] = None
    game_number: str
    start_date_utc: Optional[datetime] = None
    table_name: Optional[str] = None
    table_size: Optional[int] = None
    game_type: Optional[str] = None
    bet_limit: Optional[BetLimitModel] = None
    currency: str
    dealer_seat: int
    small_blind_amount: Decimal = Decimal("0")
    big_blind_amount: Decimal = Decimal("0")
    ante_amount: Decimal = Decimal("0")
    hero_player_id: Optional[str] = None
    players: List[PlayerModel]
    rounds: List[RoundModel] = Field(default_factory=list)
    pots: List[PotModel] = Field(default_factory=list)

    @field_validator("game_number", "hero_player_id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _id_to_str(value)
