"""
Build API — Application Package
=================================

HTTP service for create/read/update/delete of construction-material
records ("aggregates") stored in an embedded SQLite database.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (validation, 404 logic)  │  ← AggregateService
    ├─────────────────────────────────────┤
    │        Record Store (SQL)           │  ← AggregateStore
    ├─────────────────────────────────────┤
    │   Models & Schemas / Database       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
