import uuid

from sqlalchemy import func, Index, text
from ..extensions import db
from .enums import ClaimStatus, claim_status_enum


class Claim(db.Model):
    __tablename__ = "claims"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    item_id = db.Column(db.String(36), db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    seller_id = db.Column(db.String(36), db.ForeignKey("sellers.id", ondelete="CASCADE"), nullable=False)
    status = db.Column(claim_status_enum, nullable=False, default=ClaimStatus.ACTIVE, server_default=ClaimStatus.ACTIVE.value)
    seller_confirmed_terms = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    contact_revealed = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    outcome = db.Column(db.Text)
    claimed_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    released_at = db.Column(db.DateTime(timezone=True))
    completed_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    item = db.relationship("Item", back_populates="claims")
    seller = db.relationship("Seller", back_populates="claims", foreign_keys=[seller_id])

    __table_args__ = (
        # At most one active claim per item; the store arbitrates concurrent claimers
        Index(
            "uq_claims_one_active_per_item",
            "item_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        # and at most one per seller
        Index(
            "uq_claims_one_active_per_seller",
            "seller_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("idx_claims_item", "item_id"),
        Index("idx_claims_seller", "seller_id"),
        Index("idx_claims_status", "status"),
    )
