from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class GameVariant(str, Enum):
    HOLDEM = "holdem"
    OMAHA = "omaha"
    OMAHA_HI_LO = "omaha_hi_lo"


class BettingStructure(str, Enum):
    NO_LIMIT = "no_limit"
    POT_LIMIT = "pot_limit"
    LIMIT = "limit"


class Street(str, Enum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"

    @property
    def order(self) -> int:
        return STREET_ORDER.index(self)


STREET_ORDER = [Street.PREFLOP, Street.FLOP, Street.TURN, Street.RIVER, Street.SHOWDOWN]
BETTING_STREETS = STREET_ORDER[:4]


class ActionKind(str, Enum):
    DEALT_CARDS = "dealt_cards"
    POST_ANTE = "post_ante"
    POST_SMALL_BLIND = "post_small_blind"
    POST_BIG_BLIND = "post_big_blind"
    POST_STRADDLE = "post_straddle"
    POST_DEAD = "post_dead"
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    UNCALLED_BET_RETURN = "uncalled_bet_return"
    COLLECT_POT = "collect_pot"
    SHOW_CARDS = "show_cards"
    MUCK_CARDS = "muck_cards"


POST_KINDS = frozenset(
    {
        ActionKind.POST_ANTE,
        ActionKind.POST_SMALL_BLIND,
        ActionKind.POST_BIG_BLIND,
        ActionKind.POST_STRADDLE,
        ActionKind.POST_DEAD,
    }
)
WAGER_KINDS = POST_KINDS | {ActionKind.CALL, ActionKind.BET, ActionKind.RAISE}
BETTING_KINDS = WAGER_KINDS | {ActionKind.FOLD, ActionKind.CHECK}
REVEAL_KINDS = frozenset({ActionKind.SHOW_CARDS, ActionKind.MUCK_CARDS})


@dataclass(frozen=True)
class Seat:
    number: int
    player_id: str
    name: str
    starting_stack: Decimal
    display_name: str | None = None


@dataclass(frozen=True)
class Action:
    sequence: int
    player_id: str
    kind: ActionKind
    street: Street
    amount: Decimal | None = None
    cards: tuple[str, ...] = ()
    flagged_all_in: bool = False


@dataclass(frozen=True)
class BoardStreet:
    street: Street
    cards: tuple[str, ...]


@dataclass(frozen=True)
class PotAward:
    player_id: str
    amount: Decimal
    pot_index: int = 0


@dataclass(frozen=True)
class HandRecord:
    hand_id: str
    currency: str
    button_seat: int
    seats: tuple[Seat, ...]
    actions: tuple[Action, ...]
    streets: tuple[BoardStreet, ...] = ()
    pot_awards: tuple[PotAward, ...] = ()
    variant: GameVariant = GameVariant.HOLDEM
    structure: BettingStructure = BettingStructure.NO_LIMIT
    started_at: datetime | None = None
    table_name: str = "Unknown"
    max_seats: int = 9
    small_blind: Decimal = Decimal("0")
    big_blind: Decimal = Decimal("0")
    ante: Decimal = Decimal("0")
    rake: Decimal = Decimal("0")
    hero_player_id: str | None = None

    def seat_for(self, player_id: str) -> Seat:
        for seat in self.seats:
            if seat.player_id == player_id:
                return seat
        raise KeyError(f"Player not seated: {player_id}")

    def board_for(self, street: Street) -> tuple[str, ...]:
        for item in self.streets:
            if item.street == street:
                return item.cards
        return ()

    @property
    def board(self) -> tuple[str, ...]:
        cards: list[str] = []
        for street in BETTING_STREETS[1:]:
            cards.extend(self.board_for(street))
        return tuple(cards)
