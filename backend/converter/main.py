from __future__ import annotations

import importlib.util
import logging

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse

from .batch import convert_batch
from .config import ConverterSettings, load_environment
from .errors import ConversionError
from .models import (
    ConversionErrorModel,
    ConvertRequestModel,
    ConvertResponseModel,
    HandConversionModel,
    RecordFailureModel,
)
from .pipeline import convert_hand

load_environment()

settings = ConverterSettings.from_env()
logging.getLogger("backend.converter").setLevel(settings.log_level)

DefaultResponseClass = ORJSONResponse if importlib.util.find_spec("orjson") else JSONResponse

app = FastAPI(
    title="OHH to PokerStars Converter API",
    version="0.1.0",
    default_response_class=DefaultResponseClass,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/convert", response_model=ConvertResponseModel)
async def convert(payload: ConvertRequestModel) -> ConvertResponseModel:
    result = await run_in_threadpool(convert_batch, payload.content, settings)
    return ConvertResponseModel(
        output=result.text,
        hands_converted=len(result.conversions),
        failures=[
            RecordFailureModel(index=failure.index, error=failure.kind, message=failure.message)
            for failure in result.failures
        ],
        warnings=result.warnings,
    )


@app.post(
    "/api/convert/hand",
    response_model=HandConversionModel,
    responses={422: {"model": ConversionErrorModel}},
)
async def convert_single(payload: ConvertRequestModel):
    try:
        conversion = await run_in_threadpool(convert_hand, payload.content, settings)
    except ConversionError as exc:
        return DefaultResponseClass(
            status_code=422,
            content=ConversionErrorModel(error=exc.kind, message=str(exc)).model_dump(by_alias=True),
        )
    return HandConversionModel(
        hand_id=conversion.hand_id,
        output=conversion.text,
        warnings=[str(warning) for warning in conversion.warnings],
    )
