"""
Pytest fixtures for the marketplace connector tests
"""
from decimal import Decimal

import pytest

from connector import create_app
from connector.extensions import db
from connector.models import Item, Profile, Seller
from connector.models.enums import ItemStatus, PickupPreference, Role, SellerStatus, TimingPreference
from connector.modules.notifications import bus
from connector.security import Actor, issue_token


@pytest.fixture
def app():
    """Application wired to a fresh in-memory SQLite database"""
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def file_app(tmp_path):
    """Application on a file-backed SQLite database; each app context gets its own connection"""
    app = create_app("testing", {"SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'connector.db'}"})
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def owner():
    return Actor.of("owner-1", [Role.OWNER])


@pytest.fixture
def admin():
    return Actor.of("admin-1", [Role.ADMIN])


@pytest.fixture
def make_profile(app):
    def _make(user_id: str, **overrides) -> Profile:
        profile = db.session.get(Profile, user_id)
        if profile is not None:
            return profile
        fields = {
            "email": f"{user_id}@example.com",
            "first_name": user_id.split("-")[0].capitalize(),
            "last_name": "Tester",
            "phone": "+46 70 123 45 67",
        }
        fields.update(overrides)
        profile = Profile(id=user_id, **fields)
        db.session.add(profile)
        db.session.commit()
        return profile

    return _make


@pytest.fixture
def make_item(make_profile):
    def _make(owner_id: str = "owner-1", **overrides) -> Item:
        make_profile(owner_id, facebook_marketplace_link="https://facebook.com/marketplace/profile/1")
        fields = {
            "item_name": "Oak dining table",
            "brand": "IKEA",
            "location": "Uppsala",
            "photo_url": "https://cdn.example.com/items/table.jpg",
            "min_price": Decimal("50.00"),
            "pickup_preference": PickupPreference.SELLER_PICKUP,
            "timing": TimingPreference.WITHIN_WEEK,
            "owner_confirmed_terms": True,
            "status": ItemStatus.OPEN,
        }
        fields.update(overrides)
        item = Item(owner_id=owner_id, **fields)
        db.session.add(item)
        db.session.commit()
        return item

    return _make


@pytest.fixture
def make_seller(make_profile):
    """Create a seller record and return (seller, actor)"""

    def _make(user_id: str = "seller-1", status: SellerStatus = SellerStatus.ACTIVE):
        make_profile(user_id)
        seller = Seller(user_id=user_id, status=status, proof_link="https://example.com/shop")
        db.session.add(seller)
        db.session.commit()
        return seller, Actor.of(user_id, [Role.SELLER])

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(actor: Actor) -> dict:
        token = issue_token(actor.user_id, actor.roles, secret=app.config["SECRET_KEY"])
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_events():
    """Queue receiving everything published on the admin channel"""
    q = bus.subscribe(bus.ADMIN_CHANNEL)
    yield q
    bus.unsubscribe(bus.ADMIN_CHANNEL, q)
