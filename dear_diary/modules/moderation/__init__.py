"""Forum moderation: sanction ledger, ban state and admin tooling."""

from .ban_state import BanState
from .ledger import SanctionAction, SanctionLedger, SanctionOutcome
from .models import AuditLog
from .service import ModerationAdmin

__all__ = [
    "AuditLog",
    "BanState",
    "ModerationAdmin",
    "SanctionAction",
    "SanctionLedger",
    "SanctionOutcome",
]
