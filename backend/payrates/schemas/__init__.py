"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (HTTP bodies and responses)
    - Rate and date fields reuse core/rate_parsing.py so the API accepts exactly
      what the workflow accepts
"""
