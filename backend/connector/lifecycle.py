"""Item, claim and seller lifecycle.

Every public operation takes the acting principal explicitly, runs inside a
single transaction and either commits all of its writes or none of them.
Item and claim status changes are applied as compare-and-set updates so two
requests racing on the same row cannot both succeed.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterator

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from .errors import Forbidden, InvalidTransition, NotFound, TermsNotConfirmed, ValidationError
from .extensions import db
from .models import AdminNotification, Claim, Item, Profile, Seller
from .models.enums import (
    ClaimStatus,
    ItemStatus,
    NotificationType,
    PickupPreference,
    Role,
    SellerStatus,
    TimingPreference,
)
from .modules.notifications.bus import ADMIN_CHANNEL, publish
from .schemas.notification import AdminNotificationSchema
from .security import Actor

logger = logging.getLogger(__name__)


ITEM_TRANSITIONS: dict[ItemStatus, frozenset[ItemStatus]] = {
    ItemStatus.OPEN: frozenset({ItemStatus.CLAIMED}),
    ItemStatus.CLAIMED: frozenset({ItemStatus.DONE, ItemStatus.OPEN}),
    ItemStatus.DONE: frozenset(),
}

CLAIM_TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.ACTIVE: frozenset({ClaimStatus.COMPLETED, ClaimStatus.RELEASED}),
    ClaimStatus.RELEASED: frozenset(),
    ClaimStatus.COMPLETED: frozenset(),
}

# Rejection is a delete, not a state, so it has no entry here.
SELLER_TRANSITIONS: dict[SellerStatus, frozenset[SellerStatus]] = {
    SellerStatus.WAITLISTED: frozenset({SellerStatus.ACTIVE}),
    SellerStatus.ACTIVE: frozenset({SellerStatus.PAUSED}),
    SellerStatus.PAUSED: frozenset({SellerStatus.ACTIVE}),
}

_TABLES = {
    "item": ITEM_TRANSITIONS,
    "claim": CLAIM_TRANSITIONS,
    "seller": SELLER_TRANSITIONS,
}


@dataclass(frozen=True)
class ContactInfo:
    item_id: str
    owner_id: str
    name: str
    email: str
    phone: str | None
    facebook_marketplace_link: str | None


def ensure_transition(kind: str, current, target) -> None:
    """Raise InvalidTransition unless ``current -> target`` is an edge of ``kind``'s state machine."""
    table = _TABLES[kind]
    if target not in table.get(current, frozenset()):
        cur = getattr(current, "value", current)
        tgt = getattr(target, "value", target)
        logger.warning("Rejected %s transition %s -> %s", kind, cur, tgt)
        raise InvalidTransition(f"Cannot move {kind} from '{cur}' to '{tgt}'")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _unit_of_work() -> Iterator[Any]:
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity conflict, rolled back: %s", exc.orig)
        raise InvalidTransition("Conflicting update; the record changed state") from exc
    except Exception:
        db.session.rollback()
        raise


def _get(model, entity_id: str | None, label: str):
    if not entity_id:
        raise NotFound(label)
    obj = db.session.get(model, str(entity_id))
    if obj is None:
        raise NotFound(label, entity_id)
    return obj


def _require_role(actor: Actor, role: Role) -> None:
    if not actor.has_role(role):
        raise Forbidden(f"{role.value.capitalize()} role required")


def _require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise Forbidden("Admin access required")


def _compare_and_set(model, entity_id: str, expected, target, kind: str, **values) -> None:
    """Move one row from ``expected`` to ``target`` status or fail.

    The WHERE clause re-checks the status inside the store, so a caller that
    read a stale row loses with InvalidTransition instead of overwriting.
    """
    ensure_transition(kind, expected, target)
    result = db.session.execute(
        update(model)
        .where(model.id == entity_id, model.status == expected)
        .values(status=target, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning("Lost compare-and-set on %s %s (%s -> %s)", kind, entity_id, expected.value, target.value)
        raise InvalidTransition(f"{kind.capitalize()} is no longer {expected.value}")


def _notify(
    kind: NotificationType,
    title: str,
    message: str,
    *,
    user_id: str | None = None,
    item_id: str | None = None,
    claim_id: str | None = None,
) -> AdminNotification:
    n = AdminNotification(
        type=kind.value,
        title=title,
        message=message,
        related_user_id=user_id,
        related_item_id=item_id,
        related_claim_id=claim_id,
    )
    db.session.add(n)
    return n


def _publish(n: AdminNotification) -> None:
    # Fire-and-forget once the row is committed; delivery is the channel's concern
    try:
        publish(ADMIN_CHANNEL, {"type": "notification", "notification": AdminNotificationSchema().dump(n)})
    except Exception:
        logger.exception("Publishing admin notification %s failed", n.id)


def _item_label(item: Item) -> str:
    return item.item_name or "an item"


# ---------------------------------------------------------------- profiles


def upsert_profile(actor: Actor, fields: dict) -> Profile:
    """Create or update the caller's contact profile."""
    with _unit_of_work():
        profile = db.session.get(Profile, actor.user_id)
        if profile is None:
            if not fields.get("email"):
                raise ValidationError("Email is required", {"email": ["Missing data for required field."]})
            profile = Profile(id=actor.user_id)
            db.session.add(profile)
        for key in ("email", "first_name", "last_name", "phone", "facebook_marketplace_link"):
            if key in fields:
                setattr(profile, key, fields[key])
    logger.info("Profile %s saved", actor.user_id)
    return profile


def get_profile(actor: Actor) -> Profile:
    return _get(Profile, actor.user_id, "Profile")


# ------------------------------------------------------------------- items


# attribute -> API field name
_ITEM_REQUIRED = {
    "location": "location",
    "photo_url": "photoUrl",
    "min_price": "minPrice",
    "pickup_preference": "pickupPreference",
}


def post_item(actor: Actor, fields: dict) -> Item:
    _require_role(actor, Role.OWNER)
    missing = [key for attr, key in _ITEM_REQUIRED.items() if fields.get(attr) in (None, "")]
    if missing:
        raise ValidationError("Missing required item fields", {k: ["Missing data for required field."] for k in missing})
    if fields["min_price"] <= 0:
        raise ValidationError("Minimum price must be greater than zero", {"minPrice": ["Must be greater than 0."]})
    with _unit_of_work():
        if db.session.get(Profile, actor.user_id) is None:
            raise ValidationError("Create a profile with contact details before posting items")
        item = Item(
            owner_id=actor.user_id,
            item_name=fields.get("item_name"),
            brand=fields.get("brand"),
            note=fields.get("note"),
            location=fields["location"],
            photo_url=fields["photo_url"],
            min_price=fields["min_price"],
            pickup_preference=fields["pickup_preference"],
            timing=fields.get("timing"),
            owner_confirmed_terms=bool(fields.get("owner_confirmed_terms", False)),
            status=ItemStatus.OPEN,
        )
        db.session.add(item)
    logger.info("Owner %s posted item %s", actor.user_id, item.id)
    return item


def confirm_owner_terms(actor: Actor, item_id: str) -> Item:
    with _unit_of_work():
        item = _get(Item, item_id, "Item")
        if item.owner_id != actor.user_id:
            raise Forbidden("Only the item's owner can confirm its terms")
        item.owner_confirmed_terms = True
    logger.info("Owner %s confirmed terms for item %s", actor.user_id, item_id)
    return item


def get_item(item_id: str) -> Item:
    return _get(Item, item_id, "Item")


def browse_items(
    *,
    location: str | None = None,
    pickup_preference: PickupPreference | None = None,
    timing: TimingPreference | None = None,
    limit: int = 50,
) -> list[Item]:
    """Items a seller can claim right now."""
    q = Item.query.filter(Item.status == ItemStatus.OPEN, Item.owner_confirmed_terms.is_(True))
    if location:
        q = q.filter(Item.location.ilike(f"%{location}%"))
    if pickup_preference is not None:
        q = q.filter(Item.pickup_preference == pickup_preference)
    if timing is not None:
        q = q.filter(Item.timing == timing)
    return q.order_by(Item.created_at.desc()).limit(max(1, min(200, limit))).all()


def list_owner_items(actor: Actor) -> list[Item]:
    return Item.query.filter(Item.owner_id == actor.user_id).order_by(Item.created_at.desc()).all()


# ------------------------------------------------------------------ claims


def _claim_for_seller(actor: Actor, claim_id: str, *, allow_admin: bool) -> Claim:
    claim = _get(Claim, claim_id, "Claim")
    if allow_admin and actor.is_admin:
        return claim
    if claim.seller is None or claim.seller.user_id != actor.user_id:
        raise Forbidden("Only the claiming seller can do this")
    return claim


def _active_claim_of(seller_id: str) -> Claim | None:
    return Claim.query.filter_by(seller_id=seller_id, status=ClaimStatus.ACTIVE).first()


def claim_item(actor: Actor, item_id: str, seller_id: str) -> Claim:
    with _unit_of_work():
        seller = _get(Seller, seller_id, "Seller")
        if not actor.is_admin and seller.user_id != actor.user_id:
            raise Forbidden("Sellers can only claim on their own behalf")
        if seller.status != SellerStatus.ACTIVE:
            logger.warning("Seller %s (%s) attempted a claim", seller.id, seller.status.value)
            raise InvalidTransition(f"Seller is {seller.status.value}; only active sellers can claim items")
        if _active_claim_of(seller.id) is not None:
            raise InvalidTransition("Seller already holds an active claim; release or complete it first")
        item = _get(Item, item_id, "Item")
        if not item.owner_confirmed_terms:
            raise InvalidTransition("Item is not available until its owner confirms the terms")
        _compare_and_set(Item, item.id, ItemStatus.OPEN, ItemStatus.CLAIMED, "item")

        claim = Claim(item_id=item.id, seller_id=seller.id, status=ClaimStatus.ACTIVE, claimed_at=_utcnow())
        db.session.add(claim)
        db.session.flush()
        seller.active_claim_id = claim.id
        note = _notify(
            NotificationType.ITEM_CLAIMED,
            "Item claimed",
            f"{seller.profile.display_name if seller.profile else 'A seller'} claimed {_item_label(item)}.",
            user_id=seller.user_id,
            item_id=item.id,
            claim_id=claim.id,
        )
    logger.info("Seller %s claimed item %s (claim %s)", seller_id, item_id, claim.id)
    _publish(note)
    return claim


def confirm_seller_terms(actor: Actor, claim_id: str) -> Claim:
    with _unit_of_work():
        claim = _claim_for_seller(actor, claim_id, allow_admin=False)
        if claim.status != ClaimStatus.ACTIVE:
            raise InvalidTransition(f"Claim is {claim.status.value}; terms can only be confirmed on an active claim")
        claim.seller_confirmed_terms = True
    logger.info("Seller confirmed terms on claim %s", claim_id)
    return claim


def reveal_contact(actor: Actor, claim_id: str) -> ContactInfo:
    """Disclose the owner's contact details to the claiming seller.

    Idempotent once the rules of engagement are confirmed. A released claim
    never discloses anything.
    """
    with _unit_of_work():
        claim = _claim_for_seller(actor, claim_id, allow_admin=True)
        if not claim.seller_confirmed_terms:
            logger.warning("Contact reveal before terms on claim %s", claim_id)
            raise TermsNotConfirmed()
        if claim.status == ClaimStatus.RELEASED:
            raise InvalidTransition("Claim was released; contact details are no longer available")
        # only the seller's own reveal counts
        if not claim.contact_revealed and claim.seller.user_id == actor.user_id:
            claim.contact_revealed = True
            logger.info("Contact revealed on claim %s", claim_id)
        owner = claim.item.owner
        info = ContactInfo(
            item_id=claim.item_id,
            owner_id=owner.id,
            name=owner.display_name,
            email=owner.email,
            phone=owner.phone,
            facebook_marketplace_link=owner.facebook_marketplace_link,
        )
    return info


def release_claim(actor: Actor, claim_id: str) -> Item:
    with _unit_of_work():
        claim = _claim_for_seller(actor, claim_id, allow_admin=True)
        item = claim.item
        seller = claim.seller
        _compare_and_set(Claim, claim.id, claim.status, ClaimStatus.RELEASED, "claim", released_at=_utcnow())
        _compare_and_set(Item, item.id, item.status, ItemStatus.OPEN, "item")
        if seller.active_claim_id == claim.id:
            seller.active_claim_id = None
        note = _notify(
            NotificationType.CLAIM_RELEASED,
            "Claim released",
            f"{_item_label(item).capitalize()} is open for claiming again.",
            user_id=seller.user_id,
            item_id=item.id,
            claim_id=claim.id,
        )
    logger.info("Claim %s released; item %s reopened", claim_id, item.id)
    _publish(note)
    return item


def complete_claim(actor: Actor, claim_id: str, outcome: str | None = None) -> Item:
    with _unit_of_work():
        claim = _claim_for_seller(actor, claim_id, allow_admin=True)
        item = claim.item
        seller = claim.seller
        _compare_and_set(
            Claim, claim.id, claim.status, ClaimStatus.COMPLETED, "claim",
            completed_at=_utcnow(), outcome=outcome,
        )
        _compare_and_set(Item, item.id, item.status, ItemStatus.DONE, "item")
        db.session.execute(
            update(Seller)
            .where(Seller.id == seller.id)
            .values(claims_used=Seller.claims_used + 1)
            .execution_options(synchronize_session=False)
        )
        if seller.active_claim_id == claim.id:
            seller.active_claim_id = None
        note = _notify(
            NotificationType.CLAIM_COMPLETED,
            "Claim completed",
            f"{_item_label(item).capitalize()} was sold.",
            user_id=seller.user_id,
            item_id=item.id,
            claim_id=claim.id,
        )
    logger.info("Claim %s completed; item %s done", claim_id, item.id)
    _publish(note)
    return item


def get_claim(actor: Actor, claim_id: str) -> Claim:
    claim = _get(Claim, claim_id, "Claim")
    if actor.is_admin:
        return claim
    if claim.seller and claim.seller.user_id == actor.user_id:
        return claim
    if claim.item and claim.item.owner_id == actor.user_id:
        return claim
    # hide existence from unrelated users
    raise NotFound("Claim", claim_id)


def list_seller_claims(actor: Actor) -> list[Claim]:
    seller = Seller.query.filter_by(user_id=actor.user_id).first()
    if seller is None:
        return []
    return Claim.query.filter(Claim.seller_id == seller.id).order_by(Claim.claimed_at.desc()).all()


# ----------------------------------------------------------------- sellers


def apply_seller(actor: Actor, fields: dict) -> Seller:
    """Submit a seller application; it waits for admin review."""
    if not (fields.get("proof_link") or fields.get("proof_screenshot_url")):
        raise ValidationError(
            "Proof of selling experience is required",
            {"proofLink": ["Provide a proof link or a screenshot URL."]},
        )
    with _unit_of_work():
        profile = db.session.get(Profile, actor.user_id)
        if profile is None:
            if not fields.get("email"):
                raise ValidationError("Email is required", {"email": ["Missing data for required field."]})
            profile = Profile(id=actor.user_id, email=fields["email"])
            db.session.add(profile)
        for key in ("email", "first_name", "last_name", "phone"):
            if fields.get(key):
                setattr(profile, key, fields[key])
        if Seller.query.filter_by(user_id=actor.user_id).first() is not None:
            raise InvalidTransition("A seller application already exists for this user")
        seller = Seller(
            user_id=actor.user_id,
            status=SellerStatus.WAITLISTED,
            service_area=fields.get("service_area"),
            proof_link=fields.get("proof_link"),
            proof_screenshot_url=fields.get("proof_screenshot_url"),
            applied_at=_utcnow(),
        )
        db.session.add(seller)
        db.session.flush()
        note = _notify(
            NotificationType.SELLER_APPLICATION,
            "New seller application",
            f"{profile.display_name} applied to become a seller.",
            user_id=actor.user_id,
        )
    logger.info("User %s applied as seller %s", actor.user_id, seller.id)
    _publish(note)
    return seller


def get_own_seller(actor: Actor) -> Seller:
    seller = Seller.query.filter_by(user_id=actor.user_id).first()
    if seller is None:
        raise NotFound("Seller")
    return seller


def approve_seller(actor: Actor, seller_id: str) -> Seller:
    _require_admin(actor)
    with _unit_of_work():
        seller = _get(Seller, seller_id, "Seller")
        ensure_transition("seller", seller.status, SellerStatus.ACTIVE)
        seller.status = SellerStatus.ACTIVE
        seller.activated_at = _utcnow()
    logger.info("Admin %s approved seller %s", actor.user_id, seller_id)
    return seller


def reject_seller(actor: Actor, seller_id: str) -> None:
    """Reject a waitlisted application by deleting the seller record."""
    _require_admin(actor)
    with _unit_of_work():
        seller = _get(Seller, seller_id, "Seller")
        if seller.status != SellerStatus.WAITLISTED:
            raise InvalidTransition(f"Seller is {seller.status.value}; only waitlisted sellers can be rejected")
        db.session.delete(seller)
    logger.info("Admin %s rejected seller %s", actor.user_id, seller_id)


def pause_seller(actor: Actor, seller_id: str) -> Seller:
    _require_admin(actor)
    with _unit_of_work():
        seller = _get(Seller, seller_id, "Seller")
        ensure_transition("seller", seller.status, SellerStatus.PAUSED)
        seller.status = SellerStatus.PAUSED
    logger.info("Admin %s paused seller %s", actor.user_id, seller_id)
    return seller


def resume_seller(actor: Actor, seller_id: str) -> Seller:
    _require_admin(actor)
    with _unit_of_work():
        seller = _get(Seller, seller_id, "Seller")
        # approval, not resume, activates a waitlisted seller
        if seller.status != SellerStatus.PAUSED:
            raise InvalidTransition(f"Seller is {seller.status.value}; only paused sellers can be resumed")
        ensure_transition("seller", seller.status, SellerStatus.ACTIVE)
        seller.status = SellerStatus.ACTIVE
    logger.info("Admin %s resumed seller %s", actor.user_id, seller_id)
    return seller


def list_sellers(actor: Actor, status: SellerStatus | None = None) -> list[Seller]:
    _require_admin(actor)
    q = Seller.query
    if status is not None:
        q = q.filter(Seller.status == status)
    return q.order_by(Seller.applied_at.desc()).all()


# ----------------------------------------------------------- notifications


def list_notifications(actor: Actor, *, unread_only: bool = False, limit: int = 50) -> list[AdminNotification]:
    _require_admin(actor)
    q = AdminNotification.query
    if unread_only:
        q = q.filter(AdminNotification.is_read.is_(False))
    return q.order_by(AdminNotification.created_at.desc()).limit(max(1, limit)).all()


def mark_notification_read(actor: Actor, notification_id: str) -> AdminNotification:
    _require_admin(actor)
    with _unit_of_work():
        n = _get(AdminNotification, notification_id, "Notification")
        # is_read never flips back
        if not n.is_read:
            n.is_read = True
    return n
