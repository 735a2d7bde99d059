"""
Chart API Endpoints

Candles, indicators and Fibonacci retracement over the stored series.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.schemas.chart import Candle, FibLevels, IndicatorPoint
from app.services.base import ServiceError
from app.services.chart import ChartQueryService, describe_error

router = APIRouter()


def get_chart_service(request: Request) -> ChartQueryService:
    """Query service created by the application lifespan."""
    return request.app.state.chart_service


def _http_error(error: ServiceError) -> HTTPException:
    status_code, body = describe_error(error)
    return HTTPException(status_code=status_code, detail=body)


@router.get("/candles", response_model=list[Candle])
async def get_candles(
    limit: Optional[int] = Query(default=None, ge=1, description="Number of most recent candles"),
    service: ChartQueryService = Depends(get_chart_service),
):
    """
    Get OHLCV candles in ascending timestamp order.

    With `limit`, returns the last `limit` bars.
    """
    try:
        return await service.get_candles(limit)
    except ServiceError as e:
        raise _http_error(e)


@router.get("/indicators", response_model=list[IndicatorPoint])
async def get_indicators(service: ChartQueryService = Depends(get_chart_service)):
    """
    Get SMA-14, EMA-14 and RSI-14 for every candle.

    SMA and RSI are null for the first 13 candles.
    """
    try:
        return await service.get_indicators()
    except ServiceError as e:
        raise _http_error(e)


@router.get("/fib", response_model=FibLevels)
async def get_fib(
    start: Optional[str] = Query(default=None, description="YYYY-MM-DD HH:MM:SS"),
    end: Optional[str] = Query(default=None, description="YYYY-MM-DD HH:MM:SS"),
    service: ChartQueryService = Depends(get_chart_service),
):
    """
    Get Fibonacci retracement levels over the candles in [start, end].

    Both bounds are inclusive and optional.
    """
    try:
        return await service.get_fib(start, end)
    except ServiceError as e:
        raise _http_error(e)
