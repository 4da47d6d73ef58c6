"""HTTP route definitions for the telemetry service."""

from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import ReadingPayload, TelemetrySummaryPayload
from datastore.readings import ReadingStore, build_default_store
from models.records import Reading
from services.aggregator import LatestPositionAggregator, TelemetrySummarizer

router = APIRouter()

logger = logging.getLogger(__name__)


def get_store() -> ReadingStore:
    return build_default_store()


def _fetch_recent(store: ReadingStore, limit: int) -> List[Reading]:
    try:
        return store.fetch_recent(limit)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post(
    "/iot/data",
    status_code=status.HTTP_201_CREATED,
    response_model=ReadingPayload,
    summary="Append one telemetry reading.",
)
async def ingest_reading(
    payload: ReadingPayload,
    store: ReadingStore = Depends(get_store),
) -> ReadingPayload:
    reading = payload.to_reading()
    store.append(reading)
    return ReadingPayload.from_reading(reading)


@router.get(
    "/iot/latest",
    response_model=List[ReadingPayload],
    summary="Most recent readings across all sensors, newest first.",
)
async def latest_readings(
    limit: int = Query(50, gt=0, le=1000),
    store: ReadingStore = Depends(get_store),
) -> List[ReadingPayload]:
    return [ReadingPayload.from_reading(reading) for reading in _fetch_recent(store, limit)]


@router.get(
    "/iot/sensors/{sensor_id}",
    response_model=List[ReadingPayload],
    summary="Recent readings for one sensor, newest first.",
)
async def sensor_history(
    sensor_id: str,
    limit: int = Query(20, gt=0, le=1000),
    store: ReadingStore = Depends(get_store),
) -> List[ReadingPayload]:
    try:
        readings = store.fetch_for_sensor(sensor_id, limit)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return [ReadingPayload.from_reading(reading) for reading in readings]


@router.get(
    "/iot/positions",
    response_model=Dict[str, ReadingPayload],
    summary="Current reading per sensor within the latest window.",
)
async def current_positions(
    limit: int = Query(50, gt=0, le=1000),
    store: ReadingStore = Depends(get_store),
) -> Dict[str, ReadingPayload]:
    latest = LatestPositionAggregator().aggregate(_fetch_recent(store, limit))
    logger.debug("Aggregated positions", extra={"limit": limit, "sensor_count": len(latest)})
    return {sensor_id: ReadingPayload.from_reading(reading) for sensor_id, reading in latest.items()}


@router.get(
    "/iot/summary",
    response_model=TelemetrySummaryPayload,
    summary="Temperature and motion statistics over the latest window.",
)
async def window_summary(
    limit: int = Query(50, gt=0, le=1000),
    store: ReadingStore = Depends(get_store),
) -> TelemetrySummaryPayload:
    summary = TelemetrySummarizer().summarize(_fetch_recent(store, limit))
    return TelemetrySummaryPayload(
        reading_count=summary.reading_count,
        min_temperature=summary.min_temperature,
        max_temperature=summary.max_temperature,
        mean_temperature=summary.mean_temperature,
        motion_events=summary.motion_events,
        per_sensor_count=dict(summary.per_sensor_count),
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
