"""Infrastructure Layer — database access, store implementations and logging.

Invariants:
    - Store implementations translate driver/transport exceptions into
      core/errors.py types before they leave this package
"""
