"""Core Layer — pure rate-management logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic ("today" is always a parameter)

Design Decisions:
    - Functional core separated from imperative shell: services/ awaits the
      store, core/ decides what the answers mean
"""
