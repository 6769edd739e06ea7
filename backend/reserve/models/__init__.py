"""Models package - Import all models for SQLAlchemy registration."""
from reserve.models.user import User
from reserve.models.deposit import (
    Deposit, DepositState, MediaType, STATUS_ACTIVE, STATUS_INACTIVE, state_for_status
)
from reserve.models.rainy_day import RainyDayLog, VALID_RATINGS
from reserve.models.circle import (
    Connection, ConnectionStatus, CircleInvite, InviteStatus, InviteType,
    SharedDeposit, SharedDepositUsage
)

__all__ = [
    "User",
    "Deposit",
    "DepositState",
    "MediaType",
    "STATUS_ACTIVE",
    "STATUS_INACTIVE",
    "state_for_status",
    "RainyDayLog",
    "VALID_RATINGS",
    "Connection",
    "ConnectionStatus",
    "CircleInvite",
    "InviteStatus",
    "InviteType",
    "SharedDeposit",
    "SharedDepositUsage",
]
