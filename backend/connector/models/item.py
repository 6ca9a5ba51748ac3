import uuid

from sqlalchemy import func, Index, CheckConstraint
from ..extensions import db
from .enums import ItemStatus, item_status_enum, pickup_preference_enum, timing_preference_enum


class Item(db.Model):
    __tablename__ = "items"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = db.Column(db.String(64), db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    item_name = db.Column(db.String(200))
    brand = db.Column(db.String(120))
    note = db.Column(db.Text)
    location = db.Column(db.String(200), nullable=False)
    photo_url = db.Column(db.String(512), nullable=False)
    status = db.Column(item_status_enum, nullable=False, default=ItemStatus.OPEN, server_default=ItemStatus.OPEN.value)
    min_price = db.Column(db.Numeric(10, 2), nullable=False)
    pickup_preference = db.Column(pickup_preference_enum, nullable=False)
    timing = db.Column(timing_preference_enum)
    owner_confirmed_terms = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    owner = db.relationship("Profile", back_populates="items", foreign_keys=[owner_id])
    claims = db.relationship("Claim", back_populates="item", cascade="all, delete-orphan", order_by="Claim.claimed_at")

    __table_args__ = (
        CheckConstraint("min_price > 0", name="ck_items_min_price_positive"),
        Index("idx_items_status", "status"),
        Index("idx_items_owner", "owner_id"),
        Index("idx_items_location", "location"),
    )
