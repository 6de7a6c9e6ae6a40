"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Event is the aggregate root for checkpoints, registrations, teams and rounds

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from eventgate.models.user import User  # noqa: F401
from eventgate.models.event import Event  # noqa: F401
from eventgate.models.registration import Registration, CheckpointCheckIn  # noqa: F401
from eventgate.models.scan_log import ScanLog  # noqa: F401
from eventgate.models.team import Team, TeamMember  # noqa: F401
from eventgate.models.scoring import ScoringRound, TeamScore  # noqa: F401
