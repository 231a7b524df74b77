"""
Tests for tenancy agreements, rent schedules and rent payments.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from propertyhub.services.tenancy import rent_schedule

from conftest import create_user

TENANCIES = "/api/v1/tenancies"
PAYMENTS = "/api/v1/rent-payments"


# =============================================================================
# Pure schedule maths
# =============================================================================


class TestRentSchedule:
    def test_one_due_date_per_month_within_term(self):
        dates = rent_schedule(date(2024, 1, 15), date(2024, 6, 14), 1)
        assert dates == [date(2024, m, 1) for m in range(1, 6)]

    def test_due_day_clamped_to_month_length(self):
        dates = rent_schedule(date(2024, 1, 1), date(2024, 4, 30), 31)
        assert dates == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
        ]

    def test_crosses_year_boundary(self):
        dates = rent_schedule(date(2024, 11, 1), date(2025, 2, 1), 5)
        assert dates[-1] == date(2025, 2, 5)
        assert len(dates) == 4


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def parties():
    tenant = create_user("renter@example.com", role="tenant")
    landlord = create_user("owner@example.com", role="landlord")
    return tenant, landlord


@pytest.fixture
def make_tenancy(client, agent_headers, make_property, parties):
    tenant, landlord = parties

    def _make(**overrides) -> dict:
        prop = make_property()
        body = {
            "propertyId": prop["id"],
            "tenantId": tenant.id,
            "landlordId": landlord.id,
            "startDate": "2024-01-01",
            "endDate": "2024-12-31",
            "rentAmount": 1200,
            "rentDueDay": 1,
            "depositAmount": 1500,
        }
        body.update(overrides)
        resp = client.post(TENANCIES, json=body, headers=agent_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _make


# =============================================================================
# Agreements
# =============================================================================


class TestTenancies:
    def test_create_defaults(self, make_tenancy):
        tenancy = make_tenancy()
        assert tenancy["status"] == "draft"
        assert tenancy["tenancyType"] == "assured_shorthold"
        assert tenancy["rentAmount"] == 1200

    def test_end_before_start_rejected(self, client, agent_headers, make_property, parties):
        tenant, landlord = parties
        prop = make_property()
        resp = client.post(
            TENANCIES,
            json={
                "propertyId": prop["id"],
                "tenantId": tenant.id,
                "landlordId": landlord.id,
                "startDate": "2024-06-01",
                "endDate": "2024-06-01",
                "rentAmount": 900,
            },
            headers=agent_headers,
        )
        assert resp.status_code == 400

    def test_unknown_property(self, client, agent_headers, parties):
        tenant, landlord = parties
        resp = client.post(
            TENANCIES,
            json={
                "propertyId": "missing",
                "tenantId": tenant.id,
                "landlordId": landlord.id,
                "startDate": "2024-01-01",
                "endDate": "2024-12-31",
                "rentAmount": 900,
            },
            headers=agent_headers,
        )
        assert resp.status_code == 404

    def test_tenant_cannot_create(self, client, user_headers):
        resp = client.post(TENANCIES, json={}, headers=user_headers)
        assert resp.status_code in (400, 403)

    def test_list_filters(self, client, make_tenancy, agent_headers, parties):
        make_tenancy()
        make_tenancy(status="active")
        body = client.get(TENANCIES, params={"status": "active"}, headers=agent_headers).json()
        assert body["meta"]["total"] == 1
        body = client.get(
            TENANCIES, params={"tenantId": parties[0].id}, headers=agent_headers
        ).json()
        assert body["meta"]["total"] == 2

    def test_active_tenancies(self, client, make_tenancy, agent_headers):
        today = date.today()
        current = make_tenancy(
            status="active",
            startDate=str(today - timedelta(days=30)),
            endDate=str(today + timedelta(days=300)),
        )
        make_tenancy(status="active", startDate="2000-01-01", endDate="2001-01-01")
        make_tenancy(
            startDate=str(today - timedelta(days=30)), endDate=str(today + timedelta(days=300))
        )
        data = client.get(f"{TENANCIES}/active", headers=agent_headers).json()["data"]
        assert [t["id"] for t in data] == [current["id"]]

    def test_update_checks_dates(self, client, make_tenancy, agent_headers):
        tenancy = make_tenancy()
        resp = client.put(
            f"{TENANCIES}/{tenancy['id']}", json={"endDate": "2023-01-01"}, headers=agent_headers
        )
        assert resp.status_code == 400
        resp = client.put(
            f"{TENANCIES}/{tenancy['id']}", json={"status": "active"}, headers=agent_headers
        )
        assert resp.json()["data"]["status"] == "active"

    def test_delete(self, client, make_tenancy, agent_headers):
        tenancy = make_tenancy()
        assert client.delete(f"{TENANCIES}/{tenancy['id']}", headers=agent_headers).status_code == 204
        assert client.get(f"{TENANCIES}/{tenancy['id']}", headers=agent_headers).status_code == 404


# =============================================================================
# Rent schedule and payments
# =============================================================================


class TestRentPayments:
    def test_generate_schedule_is_idempotent(self, client, make_tenancy, agent_headers):
        tenancy = make_tenancy()
        url = f"{TENANCIES}/{tenancy['id']}/generate-rent-schedule"

        created = client.post(url, headers=agent_headers).json()["data"]
        assert len(created) == 12
        assert created[0]["description"] == "Monthly rent for January 2024"
        assert created[0]["amount"] == 1200
        assert created[0]["status"] == "pending"

        assert client.post(url, headers=agent_headers).json()["data"] == []
        listed = client.get(
            f"{TENANCIES}/{tenancy['id']}/rent-payments", headers=agent_headers
        ).json()["data"]
        assert len(listed) == 12

    def test_record_partial_then_full(self, client, make_tenancy, agent_headers, user_headers):
        tenancy = make_tenancy()
        payment = client.post(
            PAYMENTS,
            json={"tenancyId": tenancy["id"], "amount": 1200, "dueDate": "2024-01-01"},
            headers=agent_headers,
        ).json()["data"]
        url = f"{PAYMENTS}/{payment['id']}/record-payment"

        partial = client.post(url, json={"amount": 500}, headers=user_headers).json()["data"]
        assert partial["status"] == "partially_paid"
        assert partial["amountPaid"] == 500
        assert partial["paidDate"] == str(date.today())

        full = client.post(
            url, json={"amount": 700, "paymentMethod": "bank_transfer"}, headers=user_headers
        ).json()["data"]
        assert full["status"] == "paid"
        assert full["paymentMethod"] == "bank_transfer"

        again = client.post(url, json={"amount": 1}, headers=user_headers)
        assert again.status_code == 409

    def test_record_requires_positive_amount(self, client, make_tenancy, agent_headers):
        tenancy = make_tenancy()
        payment = client.post(
            PAYMENTS,
            json={"tenancyId": tenancy["id"], "amount": 1200, "dueDate": "2024-01-01"},
            headers=agent_headers,
        ).json()["data"]
        resp = client.post(
            f"{PAYMENTS}/{payment['id']}/record-payment", json={"amount": 0}, headers=agent_headers
        )
        assert resp.status_code == 400

    def test_overdue_and_financial_summary(self, client, make_tenancy, agent_headers):
        tenancy = make_tenancy()
        for due, amount in (("2024-01-01", 1200), ("2024-02-01", 1200)):
            client.post(
                PAYMENTS,
                json={"tenancyId": tenancy["id"], "amount": amount, "dueDate": due},
                headers=agent_headers,
            )
        future = client.post(
            PAYMENTS,
            json={
                "tenancyId": tenancy["id"],
                "amount": 1200,
                "dueDate": str(date.today() + timedelta(days=60)),
            },
            headers=agent_headers,
        ).json()["data"]
        first = client.get(
            f"{TENANCIES}/{tenancy['id']}/rent-payments", headers=agent_headers
        ).json()["data"][0]
        client.post(
            f"{PAYMENTS}/{first['id']}/record-payment", json={"amount": 1200}, headers=agent_headers
        )

        overdue = client.get(
            f"{PAYMENTS}/overdue", params={"tenancyId": tenancy["id"]}, headers=agent_headers
        ).json()["data"]
        assert [p["dueDate"] for p in overdue] == ["2024-02-01"]
        assert future["id"] not in {p["id"] for p in overdue}

        summary = client.get(
            f"{TENANCIES}/{tenancy['id']}/financial-summary", headers=agent_headers
        ).json()["data"]
        assert summary == {
            "tenancyId": tenancy["id"],
            "rentAmount": 1200,
            "totalRentDue": 3600,
            "totalRentPaid": 1200,
            "outstandingRent": 2400,
            "deposit": 1500,
            "rentPayments": 3,
            "overduePayments": 1,
        }

    def test_update_and_delete_payment(self, client, make_tenancy, agent_headers):
        tenancy = make_tenancy()
        payment = client.post(
            PAYMENTS,
            json={"tenancyId": tenancy["id"], "amount": 1200, "dueDate": "2024-01-01"},
            headers=agent_headers,
        ).json()["data"]
        resp = client.put(
            f"{PAYMENTS}/{payment['id']}", json={"lateFee": 50}, headers=agent_headers
        )
        assert resp.json()["data"]["lateFee"] == 50
        assert client.delete(f"{PAYMENTS}/{payment['id']}", headers=agent_headers).status_code == 204
        assert client.get(f"{PAYMENTS}/{payment['id']}", headers=agent_headers).status_code == 404
