import uuid

from sqlalchemy import func, Index
from ..extensions import db
from .enums import SellerStatus, seller_status_enum


class Seller(db.Model):
    __tablename__ = "sellers"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(64), db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)
    status = db.Column(seller_status_enum, nullable=False, default=SellerStatus.WAITLISTED, server_default=SellerStatus.WAITLISTED.value)
    # Claims reference sellers too; use_alter breaks the create-order cycle
    active_claim_id = db.Column(
        db.String(36),
        db.ForeignKey("claims.id", ondelete="SET NULL", use_alter=True, name="fk_sellers_active_claim_id"),
    )
    claims_used = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    service_area = db.Column(db.String(200))
    proof_link = db.Column(db.String(512))
    proof_screenshot_url = db.Column(db.String(512))
    applied_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    activated_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    profile = db.relationship("Profile", back_populates="seller", foreign_keys=[user_id])
    claims = db.relationship(
        "Claim",
        back_populates="seller",
        foreign_keys="Claim.seller_id",
        cascade="all, delete-orphan",
        lazy=True,
    )

    __table_args__ = (
        Index("idx_sellers_status", "status"),
    )
