from __future__ import annotations

from flask import Blueprint, jsonify, request

from ... import lifecycle
from ...errors import Forbidden
from ...schemas.common import load_or_raise
from ...schemas.seller import SellerSchema, SellerStatusQuerySchema
from ...security import current_actor

bp = Blueprint("admin", __name__, url_prefix="/admin")


@bp.before_request
def _require_admin():
    if not current_actor().is_admin:
        raise Forbidden("Admin access required")


@bp.get("/sellers")
def list_sellers():
    """List seller records, newest application first.

    Query params:
      - status: waitlisted|active|paused
    """
    args = load_or_raise(SellerStatusQuerySchema(), request.args.to_dict())
    sellers = lifecycle.list_sellers(current_actor(), args.get("status"))
    return jsonify({"sellers": SellerSchema(many=True).dump(sellers)})


@bp.post("/sellers/<seller_id>/approve")
def approve_seller(seller_id: str):
    seller = lifecycle.approve_seller(current_actor(), seller_id)
    return jsonify({"seller": SellerSchema().dump(seller)})


@bp.delete("/sellers/<seller_id>")
def reject_seller(seller_id: str):
    """Reject a waitlisted application. The seller record is deleted."""
    lifecycle.reject_seller(current_actor(), seller_id)
    return "", 204


@bp.post("/sellers/<seller_id>/pause")
def pause_seller(seller_id: str):
    seller = lifecycle.pause_seller(current_actor(), seller_id)
    return jsonify({"seller": SellerSchema().dump(seller)})


@bp.post("/sellers/<seller_id>/resume")
def resume_seller(seller_id: str):
    seller = lifecycle.resume_seller(current_actor(), seller_id)
    return jsonify({"seller": SellerSchema().dump(seller)})
