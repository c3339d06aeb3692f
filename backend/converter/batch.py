"""Split multi-record OHH files and convert every record independently."""

from __future__ import annotations

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .config import ConverterSettings
from .errors import ConversionError
from .pipeline import HandConversion, convert_hand

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "\n\n\n\n"

_BLANK_LINE = re.compile(r"\n[ \t\r]*\n")
_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class RecordFailure:
    index: int
    kind: str
    message: str


@dataclass(frozen=True)
class BatchResult:
    conversions: list[HandConversion] = field(default_factory=list)
    failures: list[RecordFailure] = field(default_factory=list)

    @property
    def text(self) -> str:
        return RECORD_SEPARATOR.join(conversion.text for conversion in self.conversions)

    @property
    def warnings(self) -> list[str]:
        return [str(warning) for conversion in self.conversions for warning in conversion.warnings]


def split_records(text: str) -> list[str]:
    """Return the raw text of each OHH record in a file.

    Records are consecutive JSON values, optionally separated by whitespace.  A
    top-level JSON array contributes one record per element.  A stretch that does
    not decode becomes one record reaching to the next blank line, so that it fails
    on its own during conversion.
    """
    text = text.lstrip("\ufeff")
    records: list[str] = []
    position = 0
    length = len(text)
    while position < length:
        while position < length and text[position].isspace():
            position += 1
        if position >= length:
            break

        try:
            value, end = _decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            gap = _BLANK_LINE.search(text, position)
            end = gap.start() if gap else length
            records.append(text[position:end].strip())
            position = end
            continue

        if isinstance(value, list):
            records.extend(json.dumps(item) for item in value)
        else:
            records.append(text[position:end])
        position = end
    return records


def _convert(index: int, raw: str, settings: ConverterSettings) -> HandConversion | RecordFailure:
    try:
        return convert_hand(raw, settings)
    except ConversionError as exc:
        logger.warning("Record %d failed with %s: %s", index, exc.kind, exc)
        return RecordFailure(index=index, kind=exc.kind, message=str(exc))


def convert_batch(text: str, settings: ConverterSettings | None = None) -> BatchResult:
    settings = settings or ConverterSettings()
    records = split_records(text)

    if settings.batch_workers > 1 and len(records) > 1:
        with ThreadPoolExecutor(max_workers=settings.batch_workers) as pool:
            outcomes = list(pool.map(lambda item: _convert(item[0], item[1], settings), enumerate(records)))
    else:
        outcomes = [_convert(index, raw, settings) for index, raw in enumerate(records)]

    result = BatchResult()
    for outcome in outcomes:
        if isinstance(outcome, RecordFailure):
            result.failures.append(outcome)
        else:
            result.conversions.append(outcome)

    logger.info("Converted %d of %d records", len(result.conversions), len(records))
    return result
