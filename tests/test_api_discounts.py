"""Tests for the discount tier endpoints."""

from datetime import date, timedelta

import pytest

from app.models.discount import DiscountTier


@pytest.fixture
def bulk_tier(session):
    tier = DiscountTier(
        label="Buy 3, save 10%",
        min_quantity=3,
        percentage_discount=10.0,
    )
    session.add(tier)
    session.commit()
    session.refresh(tier)
    return tier


class TestPublicTiers:
    def test_list_active_only(self, client, session, bulk_tier):
        session.add(DiscountTier(label="Retired", is_active=False))
        session.commit()

        response = client.get("/api/discount-tiers")

        assert response.status_code == 200
        tiers = response.json()["data"]
        assert [t["label"] for t in tiers] == ["Buy 3, save 10%"]
        assert tiers[0]["apply_type"] == "AUTO"
        assert tiers[0]["type"] == "amount_off_products"

    def test_filter_by_type(self, client, session, bulk_tier):
        session.add(DiscountTier(label="Ship free", type="free_shipping", free_shipping=True))
        session.commit()

        tiers = client.get("/api/discount-tiers?type=free_shipping").json()["data"]

        assert [t["label"] for t in tiers] == ["Ship free"]

    def test_current_tiers_respect_date_window(self, client, session, bulk_tier):
        today = date.today()
        session.add_all(
            [
                DiscountTier(label="Expired", end_date=today - timedelta(days=1)),
                DiscountTier(label="Upcoming", start_date=today + timedelta(days=1)),
                DiscountTier(
                    label="This week",
                    start_date=today - timedelta(days=3),
                    end_date=today + timedelta(days=3),
                ),
            ]
        )
        session.commit()

        tiers = client.get("/api/discount-tiers/active").json()["data"]

        assert sorted(t["label"] for t in tiers) == ["Buy 3, save 10%", "This week"]

    def test_get_unknown(self, client):
        response = client.get("/api/discount-tiers/404")

        assert response.status_code == 404
        assert response.json()["message"] == "Discount tier not found"


class TestTierAdmin:
    def test_create(self, client, admin_headers):
        response = client.post(
            "/api/discount-tiers",
            json={
                "apply_type": "code",
                "discount_code": " SPRING10 ",
                "percentage_discount": 10,
                "min_quantity": 2,
                "max_quantity": 5,
                "start_date": "2026-03-01",
                "end_date": "2026-05-31",
                "label": "Spring sale",
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["apply_type"] == "CODE"
        assert data["discount_code"] == "SPRING10"
        assert data["start_date"] == "2026-03-01"
        assert data["is_active"] is True

    def test_code_tier_needs_code(self, client, admin_headers):
        response = client.post(
            "/api/discount-tiers",
            json={"apply_type": "CODE", "percentage_discount": 5},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "discount_code is required for CODE tiers",
            "error": "validation_error",
        }

    @pytest.mark.parametrize(
        "body",
        [
            {"min_quantity": 5, "max_quantity": 2},
            {"start_date": "2026-06-01", "end_date": "2026-05-01"},
            {"percentage_discount": 150},
            {"apply_type": "SOMETIMES"},
        ],
    )
    def test_rejects_inconsistent_tiers(self, client, admin_headers, body):
        response = client.post("/api/discount-tiers", json=body, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_duplicate_code(self, client, session, admin_headers):
        session.add(DiscountTier(apply_type="CODE", discount_code="WELCOME"))
        session.commit()

        response = client.post(
            "/api/discount-tiers",
            json={"apply_type": "CODE", "discount_code": "WELCOME"},
            headers=admin_headers,
        )

        assert response.status_code == 409

    def test_update_checks_merged_row(self, client, admin_headers, bulk_tier):
        response = client.put(
            f"/api/discount-tiers/{bulk_tier.id}",
            json={"max_quantity": 2},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "min_quantity cannot exceed max_quantity"

    def test_update_and_list_all(self, client, admin_headers, bulk_tier):
        updated = client.put(
            f"/api/discount-tiers/{bulk_tier.id}",
            json={"is_active": False, "label": "Buy 3, save 15%", "percentage_discount": 15},
            headers=admin_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["percentage_discount"] == 15.0

        assert client.get("/api/discount-tiers").json()["data"] == []
        everything = client.get("/api/discount-tiers/all", headers=admin_headers)
        assert [t["label"] for t in everything.json()["data"]] == ["Buy 3, save 15%"]

    def test_delete(self, client, session, admin_headers, bulk_tier):
        response = client.delete(
            f"/api/discount-tiers/{bulk_tier.id}", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Discount tier deleted successfully"
        assert session.get(DiscountTier, bulk_tier.id) is None

    def test_writes_require_admin(self, client, customer, local_headers):
        response = client.post(
            "/api/discount-tiers",
            json={"percentage_discount": 5},
            headers=local_headers(customer),
        )

        assert response.status_code == 403

    def test_all_requires_admin(self, client, customer_headers):
        response = client.get("/api/discount-tiers/all", headers=customer_headers)

        assert response.status_code == 401
