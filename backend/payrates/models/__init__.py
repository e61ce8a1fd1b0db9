"""ORM Models — users and their effective-dated hourly rates.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so string-based relationship() references
      resolve before any query runs
"""

from payrates.models.user import User  # noqa: F401
from payrates.models.hourly_rate import HourlyRate  # noqa: F401
