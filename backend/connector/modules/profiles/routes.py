from flask import Blueprint, jsonify, request

from ... import lifecycle
from ...schemas.common import load_or_raise
from ...schemas.profile import ProfileSchema
from ...security import current_actor

bp = Blueprint("profiles", __name__, url_prefix="/profiles")


@bp.get("/me")
def get_my_profile():
    profile = lifecycle.get_profile(current_actor())
    return jsonify({"profile": ProfileSchema().dump(profile)})


@bp.put("/me")
def put_my_profile():
    """Create or update the caller's contact details.

    Body JSON: { email, firstName?, lastName?, phone?, facebookMarketplaceLink? }
    email is required the first time a profile is saved.
    """
    fields = load_or_raise(ProfileSchema(), request.get_json(silent=True))
    profile = lifecycle.upsert_profile(current_actor(), fields)
    return jsonify({"profile": ProfileSchema().dump(profile)})
