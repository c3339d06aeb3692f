import pytest

from backend.converter.errors import UnrenderableAmount
from backend.converter.hand import ActionKind
from backend.converter.parser import parse
from backend.converter.positions import active_seats, resolve
from backend.converter.renderer import LINE_FORMATTERS, render
from backend.converter.timeline import reconstruct
from backend.tests.samples import (
    HEADS_UP_CHECKDOWN_TEXT,
    IPOKER_SAMPLE,
    dumps,
    heads_up_checkdown,
    pot,
    short_stack_all_in,
    six_max,
    uncalled_flop_bet,
)


def _render(raw: str, show_all_hole_cards: bool = False) -> str:
    record = parse(raw)
    timeline = reconstruct(record)
    positions = resolve(record.button_seat, active_seats(record))
    return render(record, timeline, positions, show_all_hole_cards=show_all_hole_cards)


def test_every_action_kind_has_a_line_formatter() -> None:
    assert set(LINE_FORMATTERS) == set(ActionKind)


def test_heads_up_checkdown_renders_exactly() -> None:
    assert _render(dumps(heads_up_checkdown())) == HEADS_UP_CHECKDOWN_TEXT


def test_computed_awards_render_like_supplied_ones() -> None:
    assert _render(dumps(heads_up_checkdown(with_pots=False))) == HEADS_UP_CHECKDOWN_TEXT


def test_observed_ipoker_hand() -> None:
    text = _render(IPOKER_SAMPLE)
    lines = text.splitlines()

    assert lines[0] == "PokerStars Hand #lv0irhede81k: Hold'em No Limit (0.05/0.10 PPC) - 2023/12/05 2:50:49 UTC"
    assert lines[1] == "Table 'pglCX2WsUJbPBjsNSE1siiDJy' 10-max Seat #8 is the button"
    assert lines[2] == "Seat 1: Agapito (19.90 in chips)"
    assert "Dealt to DubNation [Ks 2c]" in lines
    assert "Dealt to -c6EEVvXCE [8s Ac]" in lines
    assert "-c6EEVvXCE: raises 0.12 to 0.22" in lines
    assert "DubNation: calls 0.12" in lines
    assert "*** FLOP *** [4d 3c Kd]" in lines
    assert "-c6EEVvXCE: bets 0.24" in lines
    assert "*** TURN *** [4d 3c Kd] [Tc]" in lines
    assert "*** RIVER *** [4d 3c Kd Tc] [Js]" in lines
    assert "DubNation: bets 0.48" in lines
    assert "-c6EEVvXCE: raises 1.02 to 1.50" in lines
    assert "DubNation: shows [Ks 2c] (a pair of Kings)" in lines
    assert "DubNation collected 3.97 from pot" in lines
    assert lines[lines.index("*** SUMMARY ***") :] == [
        "*** SUMMARY ***",
        "Total pot 3.97 | Rake 0.00",
        "Board [4d 3c Kd Tc Js]",
        "Seat 1: Agapito (small blind) folded before Flop",
        "Seat 4: DubNation (big blind) showed [Ks 2c] and won (3.97) with a pair of Kings",
        "Seat 5: CFFl2rCOze folded before Flop (didn't bet)",
        "Seat 6: -c6EEVvXCE showed [8s Ac] and lost with high card Ace",
        "Seat 7: E9V-2MDLwt folded before Flop (didn't bet)",
        "Seat 8: JzhSREGpIj (button) folded before Flop (didn't bet)",
    ]


def test_posts_come_before_hole_cards() -> None:
    lines = _render(IPOKER_SAMPLE).splitlines()

    hole_cards = lines.index("*** HOLE CARDS ***")
    assert lines.index("Agapito: posts small blind 0.05") < hole_cards
    assert lines.index("DubNation: posts big blind 0.10") < hole_cards
    assert lines.index("Dealt to DubNation [Ks 2c]") > hole_cards


def test_uncalled_bet_and_uncontested_pot() -> None:
    text = _render(dumps(uncalled_flop_bet()))

    assert "Uncalled bet ($100.00) returned to Alice" in text
    assert "Alice collected $6.00 from pot\nAlice: doesn't show hand" in text
    assert "*** SHOW DOWN ***" not in text
    assert text.endswith(
        "Total pot $6.00 | Rake $0.00\n"
        "Board [Ah 7d 2c]\n"
        "Seat 1: Alice (small blind) collected ($6.00)\n"
        "Seat 2: Bob (big blind) folded on the Flop\n"
        "Seat 3: Cara (button) folded on the Flop"
    )


def test_side_pots_are_named_and_broken_down() -> None:
    text = _render(dumps(short_stack_all_in()))

    assert "Cara: raises $48.00 to $50.00 and is all-in" in text
    assert "Alice collected $200.00 from side pot\nCara collected $150.00 from main pot" in text
    assert "Total pot $350.00 Main pot $150.00. Side pot $200.00. | Rake $0.00" in text
    assert "Seat 3: Cara (button) showed [Ks Kh] and won ($150.00) with three of a kind, Kings" in text
    assert "Seat 2: Bob (big blind) showed [Qh Qc] and lost with a pair of Queens" in text


def test_hero_only_hole_cards() -> None:
    payload = heads_up_checkdown()
    payload["hero_player_id"] = 2

    text = _render(dumps(payload))
    assert "Dealt to Bob [7c 2d]" in text
    assert "Dealt to Alice" not in text

    text = _render(dumps(payload), show_all_hole_cards=True)
    assert "Dealt to Alice [As Ah]" in text


def test_header_without_timestamp_and_with_omaha() -> None:
    payload = heads_up_checkdown()
    payload.pop("start_date_utc")
    payload["game_type"] = "OmahaHiLo"
    payload["bet_limit"] = {"bet_type": "PL"}
    payload["rounds"][0]["actions"][0]["cards"] = ["As", "Ah", "2c", "3c"]
    payload["rounds"][-1]["actions"][0]["cards"] = ["As", "Ah", "2c", "3c"]

    first_line = _render(dumps(payload)).splitlines()[0]
    assert first_line == "PokerStars Hand #1001: Omaha Hi/Lo Pot Limit ($1.00/$2.00 USD)"


def test_seat_lines_match_the_seat_set() -> None:
    for raw in (IPOKER_SAMPLE, dumps(six_max()), dumps(short_stack_all_in())):
        record = parse(raw)
        lines = _render(raw).split("*** HOLE CARDS ***")[0].splitlines()
        seats = [int(line.split(":")[0].split()[1]) for line in lines if line.startswith("Seat ")]
        assert seats == [seat.number for seat in record.seats]


def test_rendering_is_deterministic() -> None:
    raw = dumps(short_stack_all_in())

    assert _render(raw) == _render(raw)


def test_sub_cent_award_cannot_be_rendered() -> None:
    payload = heads_up_checkdown()
    payload["pots"] = [pot({1: 4.005})]

    with pytest.raises(UnrenderableAmount):
        _render(dumps(payload))
