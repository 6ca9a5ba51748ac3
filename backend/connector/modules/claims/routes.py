from flask import Blueprint, jsonify, request

from ... import lifecycle
from ...schemas.claim import ClaimSchema, CompleteClaimSchema, ContactInfoSchema
from ...schemas.common import load_or_raise
from ...schemas.item import ItemSchema
from ...security import current_actor

bp = Blueprint("claims", __name__, url_prefix="/claims")


@bp.get("/mine")
def my_claims():
    claims = lifecycle.list_seller_claims(current_actor())
    return jsonify({"claims": ClaimSchema(many=True).dump(claims)})


@bp.get("/<claim_id>")
def get_claim(claim_id: str):
    # Visible to the claiming seller, the item's owner and admins; 404 for anyone else
    claim = lifecycle.get_claim(current_actor(), claim_id)
    return jsonify({"claim": ClaimSchema().dump(claim)})


@bp.post("/<claim_id>/confirm-terms")
def confirm_terms(claim_id: str):
    claim = lifecycle.confirm_seller_terms(current_actor(), claim_id)
    return jsonify({"claim": ClaimSchema().dump(claim)})


@bp.post("/<claim_id>/reveal-contact")
def reveal_contact(claim_id: str):
    """Return the owner's contact details.

    Fails with 409 until the seller has confirmed the rules of engagement.
    """
    info = lifecycle.reveal_contact(current_actor(), claim_id)
    return jsonify({"contact": ContactInfoSchema().dump(info)})


@bp.post("/<claim_id>/release")
def release(claim_id: str):
    item = lifecycle.release_claim(current_actor(), claim_id)
    return jsonify({"item": ItemSchema().dump(item)})


@bp.post("/<claim_id>/complete")
def complete(claim_id: str):
    """Mark the sale done. Body JSON (optional): { outcome: str }"""
    data = load_or_raise(CompleteClaimSchema(), request.get_json(silent=True))
    item = lifecycle.complete_claim(current_actor(), claim_id, outcome=data.get("outcome"))
    return jsonify({"item": ItemSchema().dump(item)})
