from flask import Blueprint, jsonify, request

from ... import lifecycle
from ...schemas.common import load_or_raise
from ...schemas.seller import SellerApplicationSchema, SellerSchema
from ...security import current_actor

bp = Blueprint("sellers", __name__, url_prefix="/sellers")


@bp.post("")
def apply():
    """Apply to become a seller. The application waits for admin review.

    Body JSON: { email?, firstName?, lastName?, phone?, serviceArea?,
    proofLink? | proofScreenshotUrl? } (one proof is required)
    """
    fields = load_or_raise(SellerApplicationSchema(), request.get_json(silent=True))
    seller = lifecycle.apply_seller(current_actor(), fields)
    return jsonify({"seller": SellerSchema().dump(seller)}), 201


@bp.get("/me")
def my_seller():
    return jsonify({"seller": SellerSchema().dump(lifecycle.get_own_seller(current_actor()))})
