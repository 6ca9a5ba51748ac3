from marshmallow import Schema, fields


class AdminNotificationSchema(Schema):
    id = fields.Str(dump_only=True)
    type = fields.Str(dump_only=True)
    title = fields.Str(dump_only=True)
    message = fields.Str(dump_only=True, allow_none=True)
    related_user_id = fields.Str(data_key="relatedUserId", allow_none=True, dump_only=True)
    related_item_id = fields.Str(data_key="relatedItemId", allow_none=True, dump_only=True)
    related_claim_id = fields.Str(data_key="relatedClaimId", allow_none=True, dump_only=True)
    is_read = fields.Bool(data_key="isRead", dump_only=True)
    created_at = fields.DateTime(data_key="createdAt", dump_only=True)


class NotificationQuerySchema(Schema):
    unread = fields.Bool(load_default=False)
    limit = fields.Int(load_default=50)
