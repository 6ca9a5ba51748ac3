from flask import Blueprint, jsonify, request

from ... import lifecycle
from ...errors import Forbidden, NotFound
from ...schemas.claim import ClaimSchema
from ...schemas.common import load_or_raise
from ...schemas.item import ItemBrowseQuerySchema, ItemCreateSchema, ItemSchema
from ...security import current_actor

bp = Blueprint("items", __name__, url_prefix="/items")


@bp.post("")
def create_item():
    """Post an item for sale.

    Body JSON: { itemName?, brand?, note?, location, photoUrl, minPrice,
    pickupPreference: seller_pickup|buyer_pickup, timing?: asap|within_week|flexible,
    ownerConfirmedTerms? }
    """
    actor = current_actor()
    fields = load_or_raise(ItemCreateSchema(), request.get_json(silent=True))
    item = lifecycle.post_item(actor, fields)
    return jsonify({"item": ItemSchema().dump(item)}), 201


@bp.get("")
def browse_items():
    """Claimable items: open and confirmed by their owner.

    Query params:
      - location: substring match
      - pickupPreference: seller_pickup|buyer_pickup
      - timing: asap|within_week|flexible
      - limit: int (default 50, max 200)
    """
    args = load_or_raise(ItemBrowseQuerySchema(), request.args.to_dict())
    items = lifecycle.browse_items(**args)
    return jsonify({"items": ItemSchema(many=True).dump(items)})


@bp.get("/mine")
def my_items():
    items = lifecycle.list_owner_items(current_actor())
    return jsonify({"items": ItemSchema(many=True).dump(items)})


@bp.get("/<item_id>")
def get_item(item_id: str):
    return jsonify({"item": ItemSchema().dump(lifecycle.get_item(item_id))})


@bp.post("/<item_id>/confirm-terms")
def confirm_terms(item_id: str):
    item = lifecycle.confirm_owner_terms(current_actor(), item_id)
    return jsonify({"item": ItemSchema().dump(item)})


@bp.post("/<item_id>/claim")
def claim_item(item_id: str):
    actor = current_actor()
    try:
        seller = lifecycle.get_own_seller(actor)
    except NotFound:
        raise Forbidden("A seller account is required to claim items") from None
    claim = lifecycle.claim_item(actor, item_id, seller.id)
    return jsonify({"claim": ClaimSchema().dump(claim)}), 201
