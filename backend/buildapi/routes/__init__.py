# Routes package init
"""
Build API — API Routes Package
================================

Route Inventory:
    - aggregates.py:  /api/aggregates CRUD
    - home.py:        GET /          (HTML landing page)
    - health.py:      GET /health    (service health check)

Routes are thin: extract path and body, call the service, return. Status
codes for failures come from the exception handlers in main.py.
"""
