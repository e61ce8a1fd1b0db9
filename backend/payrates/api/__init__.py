"""API Layer — FastAPI routes and error handlers for the rate store service.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Thin routes delegate persistence to SqlRateStore
"""
