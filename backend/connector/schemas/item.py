from marshmallow import Schema, fields, validate

from ..models.enums import ItemStatus, PickupPreference, TimingPreference


class ItemCreateSchema(Schema):
    item_name = fields.Str(data_key="itemName", allow_none=True, validate=validate.Length(max=200))
    brand = fields.Str(allow_none=True, validate=validate.Length(max=120))
    note = fields.Str(allow_none=True)
    location = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    photo_url = fields.Str(data_key="photoUrl", required=True, validate=validate.Length(min=1, max=512))
    min_price = fields.Decimal(
        data_key="minPrice",
        required=True,
        places=2,
        validate=validate.Range(min=0, min_inclusive=False, error="Must be greater than 0."),
    )
    pickup_preference = fields.Enum(PickupPreference, by_value=True, data_key="pickupPreference", required=True)
    timing = fields.Enum(TimingPreference, by_value=True, allow_none=True)
    owner_confirmed_terms = fields.Bool(data_key="ownerConfirmedTerms", load_default=False)


class ItemBrowseQuerySchema(Schema):
    location = fields.Str()
    pickup_preference = fields.Enum(PickupPreference, by_value=True, data_key="pickupPreference")
    timing = fields.Enum(TimingPreference, by_value=True)
    limit = fields.Int(load_default=50, validate=validate.Range(min=1, max=200))


class ItemSchema(Schema):
    id = fields.Str(dump_only=True)
    owner_id = fields.Str(data_key="ownerId", dump_only=True)
    item_name = fields.Str(data_key="itemName")
    brand = fields.Str()
    note = fields.Str()
    location = fields.Str()
    photo_url = fields.Str(data_key="photoUrl")
    status = fields.Enum(ItemStatus, by_value=True, dump_only=True)
    min_price = fields.Float(data_key="minPrice")
    pickup_preference = fields.Enum(PickupPreference, by_value=True, data_key="pickupPreference")
    timing = fields.Enum(TimingPreference, by_value=True, allow_none=True)
    owner_confirmed_terms = fields.Bool(data_key="ownerConfirmedTerms")
    created_at = fields.DateTime(data_key="createdAt", dump_only=True)
    updated_at = fields.DateTime(data_key="updatedAt", dump_only=True)
