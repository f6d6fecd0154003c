"""Subscription listing, manual status overrides and plan listing."""

from datetime import timedelta

from salespath_admin.tests.factories import (
    BASE_TIME,
    add_business,
    add_plan,
    add_subscription,
    add_user,
)


def _seed_subscription(session, status="TRIAL"):
    owner = add_user(session)
    plan = add_plan(session, name="Growth")
    business = add_business(session, owner, name="Shop")
    return add_subscription(session, business, plan, status=status), business


class TestSubscriptions:
    def test_list_includes_business_and_plan_names(self, client, admin_headers, db_session):
        subscription, business = _seed_subscription(db_session)

        resp = client.get("/admin/subscriptions", headers=admin_headers)

        assert resp.status_code == 200
        item = resp.json()[0]
        assert item["id"] == subscription
        assert item["businessId"] == business
        assert item["business"] == {"name": "Shop"}
        assert item["plan"] == {"name": "Growth"}

    def test_update_status_and_billing_date(self, client, admin_headers, db_session):
        subscription, _ = _seed_subscription(db_session)
        next_billing = (BASE_TIME + timedelta(days=60)).isoformat()

        resp = client.patch(
            f"/admin/subscriptions/{subscription}",
            headers=admin_headers,
            json={"status": "ACTIVE", "nextBillingDate": next_billing},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ACTIVE"
        assert body["nextBillingDate"].startswith("2024-04-30T12:00:00")

    def test_null_billing_date_clears_it(self, client, admin_headers, db_session):
        subscription, _ = _seed_subscription(db_session)

        resp = client.patch(
            f"/admin/subscriptions/{subscription}",
            headers=admin_headers,
            json={"status": "CANCELLED", "nextBillingDate": None},
        )

        assert resp.status_code == 200
        assert resp.json()["nextBillingDate"] is None

    def test_invalid_status(self, client, admin_headers, db_session):
        subscription, _ = _seed_subscription(db_session)

        resp = client.patch(
            f"/admin/subscriptions/{subscription}",
            headers=admin_headers,
            json={"status": "PAUSED"},
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid subscription status"

    def test_unknown_subscription(self, client, admin_headers):
        resp = client.patch("/admin/subscriptions/missing", headers=admin_headers, json={"status": "ACTIVE"})
        assert resp.status_code == 404

    def test_requires_admin(self, client):
        assert client.get("/admin/subscriptions").status_code == 403


class TestPlans:
    def test_ordered_by_price(self, client, admin_headers, db_session):
        add_plan(db_session, name="Pro", max_offers=100, price=999.0)
        add_plan(db_session, name="Starter", max_offers=10, price=199.0)

        resp = client.get("/admin/plans", headers=admin_headers)

        assert resp.status_code == 200
        assert [p["name"] for p in resp.json()] == ["Starter", "Pro"]
        assert resp.json()[0]["maxOffers"] == 10
