from marshmallow import Schema, fields, validate


class ProfileSchema(Schema):
    id = fields.Str(dump_only=True)
    email = fields.Email(validate=validate.Length(max=255))
    first_name = fields.Str(data_key="firstName", allow_none=True, validate=validate.Length(max=120))
    last_name = fields.Str(data_key="lastName", allow_none=True, validate=validate.Length(max=120))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=40))
    facebook_marketplace_link = fields.Url(data_key="facebookMarketplaceLink", allow_none=True)
    display_name = fields.Str(data_key="displayName", dump_only=True)
    created_at = fields.DateTime(data_key="createdAt", dump_only=True)
    updated_at = fields.DateTime(data_key="updatedAt", dump_only=True)
