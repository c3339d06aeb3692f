import re
from decimal import Decimal

import pytest

from backend.converter.config import ConverterSettings
from backend.converter.errors import InvalidSeatCount
from backend.converter.pipeline import convert_hand
from backend.tests.samples import (
    IPOKER_SAMPLE,
    act,
    checkdown_with_muck,
    dumps,
    hand,
    heads_up_checkdown,
    player,
    pot,
    short_stack_all_in,
    six_max,
    straddle_walk,
    street,
    uncalled_flop_bet,
)


def test_convert_hand_returns_id_text_and_warnings() -> None:
    conversion = convert_hand(IPOKER_SAMPLE)

    assert conversion.hand_id == "lv0irhede81k"
    assert conversion.text.startswith("PokerStars Hand #lv0irhede81k:")
    assert conversion.warnings == ()


def test_end_to_end_heads_up_checkdown() -> None:
    text = convert_hand(dumps(heads_up_checkdown())).text

    assert "Seat 1: Alice (button) (small blind) showed [As Ah] and won ($4.00) with a pair of Aces" in text
    assert "Uncalled bet" not in text


def test_six_max_blinds_follow_the_button() -> None:
    text = convert_hand(dumps(six_max(dealer_seat=3))).text

    assert "Seat #3 is the button" in text
    assert "P4: posts small blind $1.00" in text
    assert "P5: posts big blind $2.00" in text
    assert "Seat 4: P4 (small blind) folded before Flop" in text
    assert "Seat 5: P5 (big blind) collected ($2.00)" in text
    assert "Uncalled bet ($1.00) returned to P5" in text


def test_award_mismatch_is_reported_but_rendered() -> None:
    payload = heads_up_checkdown()
    payload["pots"] = [pot({1: 5})]

    conversion = convert_hand(dumps(payload))

    assert len(conversion.warnings) == 1
    assert "Alice collected $5.00 from pot" in conversion.text


def test_show_all_hole_cards_setting() -> None:
    payload = heads_up_checkdown()
    payload["hero_player_id"] = 1

    hidden = convert_hand(dumps(payload)).text
    shown = convert_hand(dumps(payload), ConverterSettings(show_all_hole_cards=True)).text

    assert "Dealt to Bob" not in hidden
    assert "Dealt to Bob [7c 2d]" in shown


def test_single_active_seat_cannot_be_positioned() -> None:
    payload = hand(
        players=[player(1, 1, "Alice", 10), player(2, 2, "Bob", 0)],
        dealer_seat=1,
        rounds=[street("Preflop", [act(1, 1, "Post SB", 1)])],
    )

    with pytest.raises(InvalidSeatCount):
        convert_hand(dumps(payload))


def test_summary_winnings_conserve_the_pot() -> None:
    for payload in (heads_up_checkdown(), uncalled_flop_bet(), short_stack_all_in(), six_max()):
        text = convert_hand(dumps(payload)).text
        summary = text.split("*** SUMMARY ***")[1]
        total = Decimal(re.search(r"Total pot \$([\d.]+)", summary).group(1))
        won = sum(Decimal(amount) for amount in re.findall(r"(?:won|collected) \(\$([\d.]+)\)", summary))
        assert won == total


def test_conversion_is_deterministic() -> None:
    raw = dumps(short_stack_all_in())

    assert convert_hand(raw).text == convert_hand(raw).text


def test_shown_hand_beats_a_muck_when_pots_are_missing() -> None:
    text = convert_hand(dumps(checkdown_with_muck())).text

    assert "Bob: mucks hand" in text
    assert "Alice collected $4.00 from pot" in text
    assert "Bob collected" not in text
    assert "Seat 1: Alice (button) (small blind) showed [As Ah] and won ($4.00) with a pair of Aces" in text


def test_straddle_walk_end_to_end() -> None:
    text = convert_hand(dumps(straddle_walk())).text

    assert "Cara: posts straddle $4.00" in text
    assert text.index("Cara: posts straddle $4.00") < text.index("*** HOLE CARDS ***")
    assert "Uncalled bet ($2.00) returned to Cara" in text
    assert "returned to Bob" not in text
    assert "Cara collected $5.00 from pot" in text
    assert "Total pot $5.00" in text
    assert "Seat 3: Cara collected ($5.00)" in text
