"""
Build API — Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the JSON contract of the aggregates API.
Why:   FastAPI uses them to parse request bodies, serialize responses and
       generate the OpenAPI document behind /api-docs.

Design Decision:
    The optional fields are typed `Any` on purpose. Only `name` is checked,
    and only for presence (see buildapi.validation); densities and category
    are stored exactly as submitted. Typing them `float`/`str` here would
    make FastAPI coerce or reject values with a 422, which changes what the
    API accepts. The OpenAPI schema still documents the intended types.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


_CAMEL_CASE = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}

AGGREGATE_EXAMPLE = {
    "name": "Crushed Stone",
    "looseDensity": 1450,
    "compactedDensity": 1650,
    "category": "Base Material",
}


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class AggregatePayload(BaseModel):
    """
    Body of POST /api/aggregates and PUT /api/aggregates/{id}.

    Update is a full replace: fields omitted on PUT are written as NULL.
    """
    name: Any = Field(
        default=None,
        description="The name of the aggregate material",
        json_schema_extra={"type": "string"},
    )
    loose_density: Any = Field(
        default=None,
        description="The loose density of the aggregate (kg/m³)",
        json_schema_extra={"type": "number"},
    )
    compacted_density: Any = Field(
        default=None,
        description="The 95% compacted density of the aggregate (kg/m³)",
        json_schema_extra={"type": "number"},
    )
    category: Any = Field(
        default=None,
        description="The category of the aggregate (e.g., Base Material, Fine Aggregate)",
        json_schema_extra={"type": "string"},
    )

    model_config = {
        **_CAMEL_CASE,
        "json_schema_extra": {"required": ["name"], "example": AGGREGATE_EXAMPLE},
    }


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AggregateResponse(BaseModel):
    """
    A stored aggregate, or the echo of an accepted create/update.

    `id` is nullable only for the update echo, where it is parsed from the
    path rather than read back from the store.
    """
    id: Optional[int] = Field(default=None, description="The auto-generated id of the aggregate")
    name: Any = Field(
        default=None,
        description="The name of the aggregate material",
        json_schema_extra={"type": "string"},
    )
    loose_density: Any = Field(
        default=None,
        description="The loose density of the aggregate (kg/m³)",
        json_schema_extra={"type": "number"},
    )
    compacted_density: Any = Field(
        default=None,
        description="The 95% compacted density of the aggregate (kg/m³)",
        json_schema_extra={"type": "number"},
    )
    category: Any = Field(
        default=None,
        description="The category of the aggregate",
        json_schema_extra={"type": "string"},
    )

    model_config = {
        **_CAMEL_CASE,
        "json_schema_extra": {"example": {"id": 1, **AGGREGATE_EXAMPLE}},
    }


class MessageResponse(BaseModel):
    """Returned by DELETE /api/aggregates/{id}."""
    message: str = Field(description="Human-readable confirmation")


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
