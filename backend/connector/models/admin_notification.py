import uuid

from sqlalchemy import Index, func
from ..extensions import db


class AdminNotification(db.Model):
    __tablename__ = "admin_notifications"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = db.Column(db.String(60), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text)
    related_user_id = db.Column(db.String(64), db.ForeignKey("profiles.id", ondelete="SET NULL"))
    related_item_id = db.Column(db.String(36), db.ForeignKey("items.id", ondelete="SET NULL"))
    related_claim_id = db.Column(db.String(36), db.ForeignKey("claims.id", ondelete="SET NULL"))
    is_read = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_admin_notifications_read_created", "is_read", "created_at"),
    )
