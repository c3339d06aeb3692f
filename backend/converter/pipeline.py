from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import ConverterSettings
from .errors import InconsistentAction
from .parser import parse
from .positions import active_seats, resolve
from .renderer import render
from .timeline import reconstruct

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandConversion:
    hand_id: str
    text: str
    warnings: tuple[InconsistentAction, ...] = ()


def convert_hand(raw_text: str, settings: ConverterSettings | None = None) -> HandConversion:
    """Convert one OHH record to PokerStars text.

    Raises a ConversionError subclass when the record cannot be converted.
    """
    settings = settings or ConverterSettings()
    record = parse(raw_text)
    timeline = reconstruct(record, epsilon=settings.rounding_epsilon, raise_amounts=settings.raise_amounts)
    positions = resolve(record.button_seat, active_seats(record))
    text = render(record, timeline, positions, show_all_hole_cards=settings.show_all_hole_cards)
    logger.debug("Converted hand %s (%d warnings)", record.hand_id, len(timeline.warnings))
    return HandConversion(hand_id=record.hand_id, text=text, warnings=timeline.warnings)
