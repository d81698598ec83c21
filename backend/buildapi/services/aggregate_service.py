"""
Build API — Aggregate Service (Request Semantics)
===================================================

What:  The five CRUD operations as the HTTP API defines them.
Why:   Keeps status-relevant decisions (validation, not-found, echo-back)
       out of the route functions and testable without HTTP.
How:   Each method validates first, then issues exactly one store call,
       then shapes the result. Failures surface as ValidationError,
       NotFoundError or DatabaseError for the global handlers.
Who:   Called by routes/aggregates.py with an AggregateStore injected per request.

Operation summary:
    list    -> every row ([] when empty)
    get     -> row or NotFoundError
    create  -> name check, insert, echo submitted fields + new id
    update  -> name check, update by id, NotFoundError on 0 rows,
               else echo submitted fields + path id (no re-read)
    delete  -> delete by id, NotFoundError on 0 rows
"""

import logging
from typing import List, Optional

from buildapi.exceptions import NotFoundError
from buildapi.schemas.aggregate import (
    AggregatePayload,
    AggregateResponse,
    MessageResponse,
)
from buildapi.services.aggregate_store import AggregateStore
from buildapi.validation import parse_path_id, require_name

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Aggregate deleted successfully"


def _echo(aggregate_id: Optional[int], payload: AggregatePayload) -> AggregateResponse:
    return AggregateResponse(
        id=aggregate_id,
        name=payload.name,
        loose_density=payload.loose_density,
        compacted_density=payload.compacted_density,
        category=payload.category,
    )


class AggregateService:
    """
    Stateless; the store (and through it the request's session) is passed
    into every call.
    """

    async def list_aggregates(self, store: AggregateStore) -> List[AggregateResponse]:
        aggregates = await store.list_all()
        return [AggregateResponse.model_validate(aggregate.to_dict()) for aggregate in aggregates]

    async def get_aggregate(self, store: AggregateStore, aggregate_id: str) -> AggregateResponse:
        """
        Raises:
            NotFoundError: no row has this id.
        """
        aggregate = await store.get_by_id(aggregate_id)
        if aggregate is None:
            raise NotFoundError(resource="Aggregate", resource_id=aggregate_id)
        return AggregateResponse.model_validate(aggregate.to_dict())

    async def create_aggregate(
        self,
        store: AggregateStore,
        payload: Optional[AggregatePayload],
    ) -> AggregateResponse:
        """
        Validate, insert, and return the submitted fields with the new id.

        Omitted optional fields come back as null, matching what a later
        get returns for the same row.
        """
        payload = require_name(payload)
        new_id = await store.insert(payload)
        logger.info("Aggregate created: %s (%s)", new_id, payload.name)
        return _echo(new_id, payload)

    async def update_aggregate(
        self,
        store: AggregateStore,
        aggregate_id: str,
        payload: Optional[AggregatePayload],
    ) -> AggregateResponse:
        """
        Full replace by id.

        The response is built from the request, not read back: `id` is the
        path id parsed as an integer, the other fields are what was sent.
        """
        payload = require_name(payload)
        changes = await store.update_by_id(aggregate_id, payload)
        if changes == 0:
            raise NotFoundError(resource="Aggregate", resource_id=aggregate_id)
        logger.info("Aggregate updated: %s", aggregate_id)
        return _echo(parse_path_id(aggregate_id), payload)

    async def delete_aggregate(self, store: AggregateStore, aggregate_id: str) -> MessageResponse:
        changes = await store.delete_by_id(aggregate_id)
        if changes == 0:
            raise NotFoundError(resource="Aggregate", resource_id=aggregate_id)
        logger.info("Aggregate deleted: %s", aggregate_id)
        return MessageResponse(message=DELETED_MESSAGE)


aggregate_service = AggregateService()
