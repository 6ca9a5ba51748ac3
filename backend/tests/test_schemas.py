"""
Tests for request schemas
"""
from decimal import Decimal

import pytest

from connector.errors import ValidationError
from connector.models.enums import PickupPreference, TimingPreference
from connector.schemas.common import load_or_raise
from connector.schemas.item import ItemCreateSchema
from connector.schemas.seller import SellerApplicationSchema


@pytest.mark.unit
class TestItemCreateSchema:

    def test_loads_enums_and_decimal(self):
        data = load_or_raise(ItemCreateSchema(), {
            "location": "Malmö",
            "photoUrl": "https://cdn.example.com/a.jpg",
            "minPrice": "49.90",
            "pickupPreference": "buyer_pickup",
            "timing": "flexible",
        })

        assert data["min_price"] == Decimal("49.90")
        assert data["pickup_preference"] is PickupPreference.BUYER_PICKUP
        assert data["timing"] is TimingPreference.FLEXIBLE
        assert data["owner_confirmed_terms"] is False

    def test_missing_required(self):
        with pytest.raises(ValidationError) as exc:
            load_or_raise(ItemCreateSchema(), {"location": "Malmö"})
        assert set(exc.value.fields) == {"photoUrl", "minPrice", "pickupPreference"}

    def test_zero_price(self):
        with pytest.raises(ValidationError) as exc:
            load_or_raise(ItemCreateSchema(), {
                "location": "Malmö",
                "photoUrl": "https://cdn.example.com/a.jpg",
                "minPrice": 0,
                "pickupPreference": "seller_pickup",
            })
        assert exc.value.fields["minPrice"] == ["Must be greater than 0."]


@pytest.mark.unit
class TestSellerApplicationSchema:

    def test_either_proof_is_enough(self):
        assert load_or_raise(SellerApplicationSchema(), {"proofScreenshotUrl": "https://cdn/x.png"})
        assert load_or_raise(SellerApplicationSchema(), {"proofLink": "https://example.com/shop"})

    def test_proof_required(self):
        with pytest.raises(ValidationError) as exc:
            load_or_raise(SellerApplicationSchema(), {"serviceArea": "Lund"})
        assert "proofLink" in exc.value.fields

    def test_bad_email(self):
        with pytest.raises(ValidationError) as exc:
            load_or_raise(SellerApplicationSchema(), {"email": "nope", "proofLink": "https://example.com"})
        assert "email" in exc.value.fields
