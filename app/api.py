"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import (
    GroupCreatedResponse,
    GroupCreateRequest,
    IngestRequest,
    IngestResponse,
    LogEntry,
    MessageResponse,
)
from services.group_logs import GroupLogStore, build_default_store

router = APIRouter()


def get_store() -> GroupLogStore:
    return build_default_store()


@router.post(
    "/groups",
    response_model=GroupCreatedResponse,
    summary="Create an empty group.",
)
async def create_group(
    payload: GroupCreateRequest,
    store: GroupLogStore = Depends(get_store),
) -> GroupCreatedResponse:
    try:
        name = store.create_group(payload.name)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return GroupCreatedResponse(message=f"Group {name} created.", name=name)


@router.delete(
    "/groups/{name}",
    response_model=MessageResponse,
    summary="Delete a group and all of its readings.",
)
async def delete_group(
    name: str,
    store: GroupLogStore = Depends(get_store),
) -> MessageResponse:
    try:
        store.delete_group(name)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return MessageResponse(message=f"Group {name} deleted.")


@router.get(
    "/groups",
    response_model=List[str],
    summary="List group names.",
)
async def list_groups(store: GroupLogStore = Depends(get_store)) -> List[str]:
    return store.list_groups()


@router.post(
    "/data/{group}",
    response_model=IngestResponse,
    summary="Record a sensor reading, creating the group if needed.",
)
async def ingest_reading(
    group: str,
    payload: IngestRequest,
    store: GroupLogStore = Depends(get_store),
) -> IngestResponse:
    try:
        reading = store.ingest(group, payload.temperature, payload.humidity)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return IngestResponse(message="Data received.", log=LogEntry.from_reading(reading))


@router.get(
    "/logs/{group}",
    response_model=List[LogEntry],
    summary="Fetch the retained readings of a group, oldest first.",
)
async def get_logs(
    group: str,
    store: GroupLogStore = Depends(get_store),
) -> List[LogEntry]:
    try:
        readings = store.get_logs(group)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return [LogEntry.from_reading(reading) for reading in readings]


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
