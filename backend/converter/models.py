from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


def to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ConvertRequestModel(CamelModel):
    content: str = Field(min_length=1)


class RecordFailureModel(CamelModel):
    index: int
    error: str
    message: str


class ConvertResponseModel(CamelModel):
    output: str
    hands_converted: int
    failures: List[RecordFailureModel]
    warnings: List[str]


class HandConversionModel(CamelModel):
    hand_id: str
    output: str
    warnings: List[str]


class ConversionErrorModel(CamelModel):
    error: str
    message: str
