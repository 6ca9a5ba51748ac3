from sqlalchemy import func
from ..extensions import db


class Profile(db.Model):
    """Contact details for a user of the identity service.

    The primary key is the identity service's user id; this table never
    issues its own ids.
    """

    __tablename__ = "profiles"

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(120))
    last_name = db.Column(db.String(120))
    phone = db.Column(db.String(40))
    facebook_marketplace_link = db.Column(db.String(512))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    items = db.relationship(
        "Item",
        back_populates="owner",
        foreign_keys="Item.owner_id",
        lazy=True,
        cascade="all, delete-orphan",
    )
    seller = db.relationship(
        "Seller",
        back_populates="profile",
        foreign_keys="Seller.user_id",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def display_name(self) -> str:
        parts = [self.first_name, self.last_name]
        return " ".join([p for p in parts if p]) or self.email
