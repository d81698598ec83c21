# Services package init
"""
Build API — Services Layer
============================

Service Inventory:
    - AggregateStore:   SQL against the Aggregates table (one session per instance)
    - AggregateService: request semantics (name check, 404 mapping, echo-back)
"""
