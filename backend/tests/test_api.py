"""
HTTP tests for the v1 API
"""
import json

import pytest

from connector.extensions import LOCAL_ORIGINS, db
from connector.models import Seller
from connector.models.enums import Role, SellerStatus
from connector.modules.notifications import bus
from connector.security import Actor


ITEM_BODY = {
    "itemName": "Road bike",
    "brand": "Crescent",
    "location": "Uppsala",
    "photoUrl": "https://cdn.example.com/items/bike.jpg",
    "minPrice": 50,
    "pickupPreference": "seller_pickup",
    "timing": "asap",
    "ownerConfirmedTerms": True,
}


@pytest.fixture
def owner_headers(client, owner, auth_headers):
    headers = auth_headers(owner)
    resp = client.put("/api/v1/profiles/me", json={
        "email": "owner@example.com",
        "firstName": "Olga",
        "phone": "070-000 00 00",
        "facebookMarketplaceLink": "https://facebook.com/marketplace/profile/olga",
    }, headers=headers)
    assert resp.status_code == 200
    return headers


@pytest.fixture
def posted_item(client, owner_headers):
    resp = client.post("/api/v1/items", json=ITEM_BODY, headers=owner_headers)
    assert resp.status_code == 201
    return resp.get_json()["item"]


@pytest.fixture
def active_seller_headers(make_seller, auth_headers):
    _, actor = make_seller("seller-1")
    return auth_headers(actor)


@pytest.mark.api
class TestInfrastructure:

    def test_health(self, client):
        assert client.get("/health").get_json() == {"status": "ok"}

    def test_db_check(self, client):
        assert client.get("/db-check").get_json() == {"db": "ok"}

    def test_missing_identity_is_401(self, client):
        resp = client.get("/api/v1/items/mine")
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Authentication required"}

    def test_bad_token_is_401(self, client):
        resp = client.get("/api/v1/items/mine", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401

    def test_cors_preflight_allows_bearer_tokens(self, client):
        resp = client.options("/api/v1/items", headers={
            "Origin": LOCAL_ORIGINS[0],
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization",
        })
        assert resp.headers["Access-Control-Allow-Origin"] == LOCAL_ORIGINS[0]
        assert "authorization" in resp.headers["Access-Control-Allow-Headers"].lower()

    def test_debug_headers_identify_caller(self, client, make_profile):
        make_profile("owner-1")
        resp = client.get("/api/v1/profiles/me", headers={"X-User-Id": "owner-1", "X-User-Roles": "owner"})
        assert resp.status_code == 200
        assert resp.get_json()["profile"]["email"] == "owner-1@example.com"


@pytest.mark.api
class TestItemsApi:

    def test_post_and_browse(self, client, posted_item):
        assert posted_item["status"] == "open"
        assert posted_item["minPrice"] == 50.0
        assert posted_item["pickupPreference"] == "seller_pickup"

        listed = client.get("/api/v1/items?pickupPreference=seller_pickup").get_json()["items"]
        assert [i["id"] for i in listed] == [posted_item["id"]]
        assert client.get("/api/v1/items?pickupPreference=buyer_pickup").get_json()["items"] == []

    def test_validation_errors_name_fields(self, client, owner_headers):
        body = dict(ITEM_BODY, minPrice=0, pickupPreference="teleport")
        resp = client.post("/api/v1/items", json=body, headers=owner_headers)

        assert resp.status_code == 400
        payload = resp.get_json()
        assert payload["error"] == "Invalid input"
        assert set(payload["fields"]) == {"minPrice", "pickupPreference"}

    def test_seller_role_cannot_post(self, client, active_seller_headers):
        resp = client.post("/api/v1/items", json=ITEM_BODY, headers=active_seller_headers)
        assert resp.status_code == 403

    def test_unknown_item_is_404(self, client):
        assert client.get("/api/v1/items/nope").status_code == 404

    def test_owner_confirms_terms(self, client, owner_headers):
        body = dict(ITEM_BODY, ownerConfirmedTerms=False)
        item = client.post("/api/v1/items", json=body, headers=owner_headers).get_json()["item"]
        assert client.get("/api/v1/items").get_json()["items"] == []

        resp = client.post(f"/api/v1/items/{item['id']}/confirm-terms", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.get_json()["item"]["ownerConfirmedTerms"] is True

        mine = client.get("/api/v1/items/mine", headers=owner_headers).get_json()["items"]
        assert [i["id"] for i in mine] == [item["id"]]


@pytest.mark.api
class TestClaimFlowApi:

    def test_full_sale(self, client, posted_item, active_seller_headers, owner_headers):
        """
        GIVEN an open item and an active seller
        WHEN the seller claims, confirms the rules, reveals contact and completes
        THEN each step answers with the expected status and payload
        """
        resp = client.post(f"/api/v1/items/{posted_item['id']}/claim", headers=active_seller_headers)
        assert resp.status_code == 201
        claim = resp.get_json()["claim"]
        assert claim["status"] == "active"
        assert claim["contactRevealed"] is False
        assert claim["item"]["status"] == "claimed"

        early = client.post(f"/api/v1/claims/{claim['id']}/reveal-contact", headers=active_seller_headers)
        assert early.status_code == 409

        confirmed = client.post(f"/api/v1/claims/{claim['id']}/confirm-terms", headers=active_seller_headers)
        assert confirmed.get_json()["claim"]["sellerConfirmedTerms"] is True

        contact = client.post(f"/api/v1/claims/{claim['id']}/reveal-contact", headers=active_seller_headers)
        assert contact.status_code == 200
        assert contact.get_json()["contact"] == {
            "itemId": posted_item["id"],
            "ownerId": "owner-1",
            "name": "Olga",
            "email": "owner@example.com",
            "phone": "070-000 00 00",
            "facebookMarketplaceLink": "https://facebook.com/marketplace/profile/olga",
        }

        # the owner can follow the claim on their item
        seen = client.get(f"/api/v1/claims/{claim['id']}", headers=owner_headers).get_json()["claim"]
        assert seen["contactRevealed"] is True

        done = client.post(f"/api/v1/claims/{claim['id']}/complete", json={"outcome": "Sold for 80"},
                           headers=active_seller_headers)
        assert done.get_json()["item"]["status"] == "done"

        again = client.post(f"/api/v1/claims/{claim['id']}/complete", headers=active_seller_headers)
        assert again.status_code == 409

        me = client.get("/api/v1/sellers/me", headers=active_seller_headers).get_json()["seller"]
        assert me["claimsUsed"] == 1
        assert me["activeClaimId"] is None

    def test_release_then_other_seller_claims(self, client, posted_item, make_seller, auth_headers):
        _, first = make_seller("seller-1")
        _, second = make_seller("seller-2")
        claim = client.post(f"/api/v1/items/{posted_item['id']}/claim", headers=auth_headers(first)).get_json()["claim"]

        contested = client.post(f"/api/v1/items/{posted_item['id']}/claim", headers=auth_headers(second))
        assert contested.status_code == 409

        released = client.post(f"/api/v1/claims/{claim['id']}/release", headers=auth_headers(first))
        assert released.get_json()["item"]["status"] == "open"

        retry = client.post(f"/api/v1/items/{posted_item['id']}/claim", headers=auth_headers(second))
        assert retry.status_code == 201

        mine = client.get("/api/v1/claims/mine", headers=auth_headers(first)).get_json()["claims"]
        assert [c["status"] for c in mine] == ["released"]

    def test_user_without_seller_record_cannot_claim(self, client, posted_item, auth_headers):
        resp = client.post(f"/api/v1/items/{posted_item['id']}/claim",
                           headers=auth_headers(Actor.of("stranger", [Role.SELLER])))
        assert resp.status_code == 403

    def test_claim_hidden_from_unrelated_users(self, client, posted_item, active_seller_headers, auth_headers):
        claim = client.post(f"/api/v1/items/{posted_item['id']}/claim",
                            headers=active_seller_headers).get_json()["claim"]
        resp = client.get(f"/api/v1/claims/{claim['id']}", headers=auth_headers(Actor.of("nosy")))
        assert resp.status_code == 404


@pytest.mark.api
class TestSellerVettingApi:

    def test_apply_approve(self, client, auth_headers, admin):
        applicant = Actor.of("seller-7", [Role.SELLER])
        resp = client.post("/api/v1/sellers", json={
            "email": "sam@example.com",
            "firstName": "Sam",
            "serviceArea": "Uppsala",
            "proofLink": "https://example.com/sam-shop",
        }, headers=auth_headers(applicant))
        assert resp.status_code == 201
        seller = resp.get_json()["seller"]
        assert seller["status"] == "waitlisted"

        notices = client.get("/api/v1/admin/notifications?unread=true", headers=auth_headers(admin)).get_json()
        assert [n["type"] for n in notices["notifications"]] == ["seller_application"]

        approved = client.post(f"/api/v1/admin/sellers/{seller['id']}/approve", headers=auth_headers(admin))
        assert approved.status_code == 200
        body = approved.get_json()["seller"]
        assert body["status"] == "active"
        assert body["activatedAt"] is not None

    def test_apply_requires_proof(self, client, auth_headers):
        resp = client.post("/api/v1/sellers", json={"email": "sam@example.com"},
                           headers=auth_headers(Actor.of("seller-7")))
        assert resp.status_code == 400
        assert "proofLink" in resp.get_json()["fields"]

    def test_reject_deletes(self, client, make_seller, auth_headers, admin):
        seller, _ = make_seller("seller-5", status=SellerStatus.WAITLISTED)
        seller_id = seller.id

        resp = client.delete(f"/api/v1/admin/sellers/{seller_id}", headers=auth_headers(admin))

        assert resp.status_code == 204
        assert db.session.get(Seller, seller_id) is None
        assert client.delete(f"/api/v1/admin/sellers/{seller_id}", headers=auth_headers(admin)).status_code == 404

    def test_admin_routes_need_admin(self, client, active_seller_headers):
        assert client.get("/api/v1/admin/sellers", headers=active_seller_headers).status_code == 403
        assert client.get("/api/v1/admin/notifications", headers=active_seller_headers).status_code == 403

    def test_list_filter_and_pause(self, client, make_seller, auth_headers, admin):
        waiting, _ = make_seller("seller-1", status=SellerStatus.WAITLISTED)
        active, _ = make_seller("seller-2")
        headers = auth_headers(admin)

        listed = client.get("/api/v1/admin/sellers?status=waitlisted", headers=headers).get_json()["sellers"]
        assert [s["id"] for s in listed] == [waiting.id]
        assert client.get("/api/v1/admin/sellers?status=retired", headers=headers).status_code == 400

        paused = client.post(f"/api/v1/admin/sellers/{active.id}/pause", headers=headers)
        assert paused.get_json()["seller"]["status"] == "paused"
        resumed = client.post(f"/api/v1/admin/sellers/{active.id}/resume", headers=headers)
        assert resumed.get_json()["seller"]["status"] == "active"
        assert client.post(f"/api/v1/admin/sellers/{waiting.id}/resume", headers=headers).status_code == 409

    def test_mark_notification_read(self, client, auth_headers, admin, make_profile):
        make_profile("seller-7")
        client.post("/api/v1/sellers", json={"proofLink": "https://example.com/x"},
                    headers=auth_headers(Actor.of("seller-7")))
        headers = auth_headers(admin)
        notice = client.get("/api/v1/admin/notifications", headers=headers).get_json()["notifications"][0]
        assert notice["isRead"] is False

        resp = client.patch(f"/api/v1/admin/notifications/{notice['id']}/read", headers=headers)
        assert resp.get_json()["notification"]["isRead"] is True
        assert client.get("/api/v1/admin/notifications?unread=1", headers=headers).get_json()["notifications"] == []


@pytest.mark.api
class TestNotificationStreamApi:

    def test_stream_delivers_new_applications(self, client, auth_headers, admin, make_profile):
        """
        GIVEN an admin connected to the notification stream
        WHEN a user applies to become a seller
        THEN the stream sends the connect preamble followed by a notification event
        """
        make_profile("seller-7")
        before = bus.subscriber_count(bus.ADMIN_CHANNEL)
        resp = client.get("/api/v1/admin/notifications/stream", headers=auth_headers(admin), buffered=False)
        try:
            assert resp.status_code == 200
            assert resp.mimetype == "text/event-stream"
            frames = iter(resp.response)
            assert next(frames).decode() == ": connected\n\n"

            applied = client.post("/api/v1/sellers", json={"proofLink": "https://example.com/x"},
                                  headers=auth_headers(Actor.of("seller-7")))
            assert applied.status_code == 201

            frame = next(frames).decode()
            assert frame.startswith("event: notification\n")
            event = json.loads(frame.split("data: ", 1)[1])
            assert event["notification"]["type"] == "seller_application"
            assert event["notification"]["relatedUserId"] == "seller-7"
        finally:
            resp.close()
        assert bus.subscriber_count(bus.ADMIN_CHANNEL) == before

    def test_stream_needs_admin(self, client, active_seller_headers):
        resp = client.get("/api/v1/admin/notifications/stream", headers=active_seller_headers)
        assert resp.status_code == 403
