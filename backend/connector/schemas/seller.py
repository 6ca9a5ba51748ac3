from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from ..models.enums import SellerStatus
from .profile import ProfileSchema


class SellerApplicationSchema(Schema):
    # Contact fields create or refresh the applicant's profile
    email = fields.Email()
    first_name = fields.Str(data_key="firstName", validate=validate.Length(max=120))
    last_name = fields.Str(data_key="lastName", validate=validate.Length(max=120))
    phone = fields.Str(validate=validate.Length(max=40))
    service_area = fields.Str(data_key="serviceArea", allow_none=True, validate=validate.Length(max=200))
    proof_link = fields.Url(data_key="proofLink", allow_none=True)
    proof_screenshot_url = fields.Str(data_key="proofScreenshotUrl", allow_none=True, validate=validate.Length(max=512))

    @validates_schema
    def _require_proof(self, data, **kwargs):
        if not (data.get("proof_link") or data.get("proof_screenshot_url")):
            raise ValidationError("Provide a proof link or a screenshot URL.", "proofLink")


class SellerStatusQuerySchema(Schema):
    status = fields.Enum(SellerStatus, by_value=True)


class SellerSchema(Schema):
    id = fields.Str(dump_only=True)
    user_id = fields.Str(data_key="userId", dump_only=True)
    status = fields.Enum(SellerStatus, by_value=True, dump_only=True)
    active_claim_id = fields.Str(data_key="activeClaimId", allow_none=True, dump_only=True)
    claims_used = fields.Int(data_key="claimsUsed", dump_only=True)
    service_area = fields.Str(data_key="serviceArea", allow_none=True)
    proof_link = fields.Str(data_key="proofLink", allow_none=True)
    proof_screenshot_url = fields.Str(data_key="proofScreenshotUrl", allow_none=True)
    applied_at = fields.DateTime(data_key="appliedAt", dump_only=True)
    activated_at = fields.DateTime(data_key="activatedAt", allow_none=True, dump_only=True)
    profile = fields.Nested(ProfileSchema, dump_only=True)
