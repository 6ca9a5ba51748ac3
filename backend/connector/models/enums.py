import enum

from ..extensions import db


class Role(str, enum.Enum):
    OWNER = "owner"
    SELLER = "seller"
    ADMIN = "admin"


class ItemStatus(str, enum.Enum):
    OPEN = "open"
    CLAIMED = "claimed"
    DONE = "done"


class ClaimStatus(str, enum.Enum):
    ACTIVE = "active"
    RELEASED = "released"
    COMPLETED = "completed"


class SellerStatus(str, enum.Enum):
    WAITLISTED = "waitlisted"
    ACTIVE = "active"
    PAUSED = "paused"


class PickupPreference(str, enum.Enum):
    SELLER_PICKUP = "seller_pickup"
    BUYER_PICKUP = "buyer_pickup"


class TimingPreference(str, enum.Enum):
    ASAP = "asap"
    WITHIN_WEEK = "within_week"
    FLEXIBLE = "flexible"


class NotificationType(str, enum.Enum):
    SELLER_APPLICATION = "seller_application"
    ITEM_CLAIMED = "item_claimed"
    CLAIM_RELEASED = "claim_released"
    CLAIM_COMPLETED = "claim_completed"


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


# Columns persist the lowercase string values, matching the Postgres enum types.
item_status_enum = db.Enum(ItemStatus, name="item_status", values_callable=_values, validate_strings=True)
claim_status_enum = db.Enum(ClaimStatus, name="claim_status", values_callable=_values, validate_strings=True)
seller_status_enum = db.Enum(SellerStatus, name="seller_status", values_callable=_values, validate_strings=True)
pickup_preference_enum = db.Enum(PickupPreference, name="pickup_preference", values_callable=_values, validate_strings=True)
timing_preference_enum = db.Enum(TimingPreference, name="timing_preference", values_callable=_values, validate_strings=True)
