"""
Build API — Aggregates Route Handlers
=======================================

What:  The five CRUD endpoints under /api/aggregates.
Why:   Entry point for every client operation on aggregate records.
How:   Routes stay thin. They pull the path id and JSON body, hand them to
       AggregateService together with a request-scoped AggregateStore, and
       set the success status. Errors are raised as exceptions and turned
       into JSON by the handlers registered in main.py.

Route Inventory:
    GET    /api/aggregates        list all       200
    GET    /api/aggregates/{id}   get one        200 | 404
    POST   /api/aggregates        create         201 | 400
    PUT    /api/aggregates/{id}   full replace   200 | 400 | 404
    DELETE /api/aggregates/{id}   delete         200 | 404
    (every route: 500 on storage failure)

Path ids are declared as `str`: they are handed to the store unparsed, so
FastAPI never answers a non-numeric id with a 422.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from buildapi.database import get_db_session
from buildapi.schemas.aggregate import (
    AggregatePayload,
    AggregateResponse,
    ErrorResponse,
    MessageResponse,
)
from buildapi.services.aggregate_service import aggregate_service
from buildapi.services.aggregate_store import AggregateStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/aggregates", tags=["Aggregates"])

_SERVER_ERROR = {"description": "Internal server error", "model": ErrorResponse}
_NOT_FOUND = {"description": "Aggregate not found", "model": ErrorResponse}
_NAME_REQUIRED = {"description": "Aggregate name is required", "model": ErrorResponse}


def get_aggregate_store(db: AsyncSession = Depends(get_db_session)) -> AggregateStore:
    """Request-scoped store bound to the request's session. Overridden in tests."""
    return AggregateStore(db)


AggregateId = Annotated[str, Path(description="The aggregate id")]
AggregateBody = Annotated[
    Optional[AggregatePayload],
    Body(description="Aggregate fields; `name` is required"),
]


@router.get(
    "",
    response_model=List[AggregateResponse],
    responses={500: _SERVER_ERROR},
    summary="Returns the list of all aggregates",
)
async def list_aggregates(
    store: AggregateStore = Depends(get_aggregate_store),
) -> List[AggregateResponse]:
    return await aggregate_service.list_aggregates(store)


@router.get(
    "/{aggregate_id}",
    response_model=AggregateResponse,
    responses={404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Get an aggregate by id",
)
async def get_aggregate(
    aggregate_id: AggregateId,
    store: AggregateStore = Depends(get_aggregate_store),
) -> AggregateResponse:
    return await aggregate_service.get_aggregate(store, aggregate_id)


@router.post(
    "",
    status_code=201,
    response_model=AggregateResponse,
    responses={400: _NAME_REQUIRED, 500: _SERVER_ERROR},
    summary="Create a new aggregate",
    description="Creates an aggregate and returns it with the id the store assigned.",
)
async def create_aggregate(
    store: AggregateStore = Depends(get_aggregate_store),
    payload: AggregateBody = None,
) -> AggregateResponse:
    return await aggregate_service.create_aggregate(store, payload)


@router.put(
    "/{aggregate_id}",
    response_model=AggregateResponse,
    responses={400: _NAME_REQUIRED, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Update an aggregate by id",
    description=(
        "Replaces all fields of an aggregate. Fields left out of the body are "
        "cleared. The response echoes the submitted fields under the path id."
    ),
)
async def update_aggregate(
    aggregate_id: AggregateId,
    store: AggregateStore = Depends(get_aggregate_store),
    payload: AggregateBody = None,
) -> AggregateResponse:
    return await aggregate_service.update_aggregate(store, aggregate_id, payload)


@router.delete(
    "/{aggregate_id}",
    response_model=MessageResponse,
    responses={404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Delete an aggregate by id",
)
async def delete_aggregate(
    aggregate_id: AggregateId,
    store: AggregateStore = Depends(get_aggregate_store),
) -> MessageResponse:
    return await aggregate_service.delete_aggregate(store, aggregate_id)
