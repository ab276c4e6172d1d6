"""Convenience imports for all schema classes used by the API."""

from .user import UserCreate, UserResponse, UserLogin
from .child import ChildCreate
from .activity import (
    StarRequestCreate,
    StarRecordCreate,
    StarTransactionRead,
    BatchApprove,
    BatchReject,
    BatchResponse,
)
from .quest import (
    QuestCreate,
    QuestUpdate,
    QuestRead,
    QuestGroupRead,
    SuggestedStars,
)
from .level import LevelCreate, LevelUpdate, LevelRead, LevelProgressRead
from .reward import RewardCreate, RewardRead
from .redemption import (
    RedemptionCreate,
    RedemptionRead,
    RedemptionApprove,
    RedemptionReject,
    RedemptionBatchApprove,
    RedemptionBatchReject,
)
from .credit import (
    ChildBalanceWithCredit,
    CreditSettingsUpdate,
    CreditSettingsRead,
    InterestTierCreate,
    InterestTierUpdate,
    InterestTierRead,
)

__all__ = [
    "UserCreate",
    "UserResponse",
    "UserLogin",
    "ChildCreate",
    "StarRequestCreate",
    "StarRecordCreate",
    "StarTransactionRead",
    "BatchApprove",
    "BatchReject",
    "BatchResponse",
    "QuestCreate",
    "QuestUpdate",
    "QuestRead",
    "QuestGroupRead",
    "SuggestedStars",
    "LevelCreate",
    "LevelUpdate",
    "LevelRead",
    "LevelProgressRead",
    "RewardCreate",
    "RewardRead",
    "RedemptionCreate",
    "RedemptionRead",
    "RedemptionApprove",
    "RedemptionReject",
    "RedemptionBatchApprove",
    "RedemptionBatchReject",
    "ChildBalanceWithCredit",
    "CreditSettingsUpdate",
    "CreditSettingsRead",
    "InterestTierCreate",
    "InterestTierUpdate",
    "InterestTierRead",
]
