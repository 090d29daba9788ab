"""SQLAlchemy models package.

All ORM classes must be registered deterministically so mapper configuration
(relationship string resolution) cannot fail depending on import order.
"""

from nippo.models import (  # noqa: F401
    comment,
    customer,
    daily_report,
    employee,
)
