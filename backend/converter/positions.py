from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from .errors import InvalidSeatCount
from .hand import HandRecord


class Position(str, Enum):
    SMALL_BLIND = "SB"
    BIG_BLIND = "BB"
    UNDER_THE_GUN = "UTG"
    UTG_PLUS_1 = "UTG+1"
    UTG_PLUS_2 = "UTG+2"
    MIDDLE = "MP"
    LOJACK = "LJ"
    HIJACK = "HJ"
    CUTOFF = "CO"
    BUTTON = "BTN"


# Seats between the big blind and the button, keyed by how many there are.
_MIDDLE_LABELS: dict[int, list[Position]] = {
    0: [],
    1: [Position.UNDER_THE_GUN],
    2: [Position.UNDER_THE_GUN, Position.CUTOFF],
    3: [Position.UNDER_THE_GUN, Position.HIJACK, Position.CUTOFF],
    4: [Position.UNDER_THE_GUN, Position.MIDDLE, Position.HIJACK, Position.CUTOFF],
    5: [Position.UNDER_THE_GUN, Position.UTG_PLUS_1, Position.MIDDLE, Position.HIJACK, Position.CUTOFF],
    6: [
        Position.UNDER_THE_GUN,
        Position.UTG_PLUS_1,
        Position.UTG_PLUS_2,
        Position.MIDDLE,
        Position.HIJACK,
        Position.CUTOFF,
    ],
    7: [
        Position.UNDER_THE_GUN,
        Position.UTG_PLUS_1,
        Position.UTG_PLUS_2,
        Position.MIDDLE,
        Position.LOJACK,
        Position.HIJACK,
        Position.CUTOFF,
    ],
}

MAX_LABELLED_SEATS = 3 + max(_MIDDLE_LABELS)


@dataclass(frozen=True)
class PositionMap:
    button_seat: int
    labels: Mapping[int, Position]

    def label_for(self, seat: int) -> Position | None:
        return self.labels.get(seat)

    def seat_of(self, position: Position) -> int | None:
        for seat, label in self.labels.items():
            if label == position:
                return seat
        return None

    def is_button(self, seat: int) -> bool:
        return seat == self.button_seat

    def is_small_blind(self, seat: int) -> bool:
        return self.labels.get(seat) == Position.SMALL_BLIND

    def is_big_blind(self, seat: int) -> bool:
        return self.labels.get(seat) == Position.BIG_BLIND


def clockwise_from_button(button_seat: int, seats: Iterable[int]) -> list[int]:
    """Order seats starting with the first seat left of the button; the button comes last."""
    return sorted(seats, key=lambda seat: (seat <= button_seat, seat))


def resolve(button_seat: int, active_seats: Iterable[int]) -> PositionMap:
    seats = sorted(set(active_seats))
    count = len(seats)
    if count < 2:
        raise InvalidSeatCount(f"Need at least two active seats to assign positions, got {count}.")
    if count > MAX_LABELLED_SEATS:
        raise InvalidSeatCount(f"Cannot assign positions for {count} active seats.")

    order = clockwise_from_button(button_seat, seats)

    if count == 2:
        # Heads-up: the button posts the small blind.
        if button_seat in seats:
            small_blind = button_seat
            big_blind = next(seat for seat in seats if seat != button_seat)
        else:
            small_blind, big_blind = order
        return PositionMap(
            button_seat=button_seat,
            labels={small_blind: Position.SMALL_BLIND, big_blind: Position.BIG_BLIND},
        )

    labels = [Position.SMALL_BLIND, Position.BIG_BLIND, *_MIDDLE_LABELS[count - 3], Position.BUTTON]
    return PositionMap(button_seat=button_seat, labels=dict(zip(order, labels)))


def active_seats(record: HandRecord) -> list[int]:
    return [seat.number for seat in record.seats if seat.starting_stack > 0]
