from marshmallow import Schema, fields, validate

from ..models.enums import ClaimStatus
from .item import ItemSchema


class ClaimSchema(Schema):
    id = fields.Str(dump_only=True)
    item_id = fields.Str(data_key="itemId", dump_only=True)
    seller_id = fields.Str(data_key="sellerId", dump_only=True)
    status = fields.Enum(ClaimStatus, by_value=True, dump_only=True)
    seller_confirmed_terms = fields.Bool(data_key="sellerConfirmedTerms", dump_only=True)
    contact_revealed = fields.Bool(data_key="contactRevealed", dump_only=True)
    outcome = fields.Str(dump_only=True)
    claimed_at = fields.DateTime(data_key="claimedAt", dump_only=True)
    released_at = fields.DateTime(data_key="releasedAt", dump_only=True)
    completed_at = fields.DateTime(data_key="completedAt", dump_only=True)
    item = fields.Nested(ItemSchema, dump_only=True)


class CompleteClaimSchema(Schema):
    outcome = fields.Str(allow_none=True, validate=validate.Length(max=2000))


class ContactInfoSchema(Schema):
    item_id = fields.Str(data_key="itemId")
    owner_id = fields.Str(data_key="ownerId")
    name = fields.Str()
    email = fields.Str()
    phone = fields.Str(allow_none=True)
    facebook_marketplace_link = fields.Str(data_key="facebookMarketplaceLink", allow_none=True)
