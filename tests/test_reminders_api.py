"""
API tests for reminder endpoints
"""
import pytest
import random

from lendnudge.core.dependencies import get_rng
from lendnudge.modules.reminders.composer import select_template
from main import app


class TestTemplateEndpoints:
    """Tests for /api/v1/reminders/templates"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_list_templates(self, client, auth_headers):
        response = await client.get("/api/v1/reminders/templates", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["templates"]) == 5

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_filter_by_tone(self, client, auth_headers):
        response = await client.get("/api/v1/reminders/templates?tone=gentle", headers=auth_headers)

        templates = response.json()["templates"]
        assert [t["id"] for t in templates] == ["3", "5"]
        assert all(t["tone"] == "gentle" for t in templates)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_tone(self, client, auth_headers):
        response = await client.get("/api/v1/reminders/templates?tone=angry", headers=auth_headers)
        assert response.status_code == 400


class TestComposeEndpoints:
    """Tests for composing messages and links"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_compose_with_template(self, client, auth_headers, test_loan):
        response = await client.post(
            f"/api/v1/reminders/{test_loan.id}/compose",
            json={"template_id": "1"},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["template"]["id"] == "1"
        assert "Alex Chen" in data["message"]
        assert "$50" in data["message"]
        assert "Mar 5, 2024" in data["message"]
        assert data["message"].endswith(" (Concert tickets)")
        assert data["links"]["whatsapp"].startswith("https://wa.me/15550109999?text=")
        assert data["links"]["email"].startswith("mailto:alex@example.com?subject=")
        assert data["email_template"]["subject"] == "Friendly reminder about the money from Mar 5, 2024"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_compose_without_symbol(self, client, auth_headers, test_loan):
        response = await client.post(
            f"/api/v1/reminders/{test_loan.id}/compose",
            json={"template_id": "2", "with_currency_symbol": False},
            headers=auth_headers
        )
        assert "$" not in response.json()["message"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_compose_random_template_uses_injected_rng(self, client, auth_headers, test_loan):
        app.dependency_overrides[get_rng] = lambda: random.Random(42)
        expected = select_template(rng=random.Random(42))

        response = await client.post(
            f"/api/v1/reminders/{test_loan.id}/compose", json={}, headers=auth_headers
        )

        assert response.json()["template"]["id"] == expected.id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_compose_does_not_log_reminder(self, client, auth_headers, test_loan):
        await client.post(f"/api/v1/reminders/{test_loan.id}/compose", json={}, headers=auth_headers)

        response = await client.get(f"/api/v1/reminders/{test_loan.id}/status", headers=auth_headers)
        assert response.json()["reminder_count"] == 0

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_email_template(self, client, auth_headers, test_loan):
        response = await client.get(f"/api/v1/reminders/{test_loan.id}/email-template", headers=auth_headers)

        data = response.json()
        assert data["body"].startswith("Hi Alex Chen,")
        assert "$50 from Mar 5, 2024 (Concert tickets)." in data["body"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_links_for_edited_message(self, client, auth_headers, test_loan):
        response = await client.post(
            f"/api/v1/reminders/{test_loan.id}/links",
            json={"message": "Hi & bye"},
            headers=auth_headers
        )

        links = response.json()["links"]
        assert links["sms"] == "sms:+1 (555) 010-9999?body=Hi%20%26%20bye"
        assert links["whatsapp"] == "https://wa.me/15550109999?text=Hi%20%26%20bye"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_links_default_to_email_body(self, client, auth_headers, test_loan):
        response = await client.post(f"/api/v1/reminders/{test_loan.id}/links", json={}, headers=auth_headers)
        assert response.json()["message"].startswith("Hi Alex Chen,")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_other_owner_cannot_compose(self, client, other_auth_headers, test_loan):
        response = await client.post(
            f"/api/v1/reminders/{test_loan.id}/compose", json={}, headers=other_auth_headers
        )
        assert response.status_code == 404


class TestReminderSentFlow:
    """Tests for logging sent reminders over time"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_status_ready(self, client, auth_headers, test_loan):
        response = await client.get(f"/api/v1/reminders/{test_loan.id}/status", headers=auth_headers)

        data = response.json()
        assert data["state"] == "ready"
        assert data["label"] == "Ready to send"
        assert data["days_since_loan"] == 5
        assert data["reminders_left"] == 3

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_send_then_cooldown(self, client, auth_headers, test_loan):
        url = f"/api/v1/reminders/{test_loan.id}/sent"

        response = await client.post(url, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Reminder logged"
        assert data["loan"]["reminder_count"] == 1
        assert data["reminder"]["label"] == "Next reminder in 2 days"

        response = await client.post(url, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Reminder not allowed: Next reminder in 2 days"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_three_reminders_then_capped(self, client, auth_headers, test_loan, clock):
        url = f"/api/v1/reminders/{test_loan.id}/sent"

        for expected in (1, 2, 3):
            response = await client.post(url, headers=auth_headers)
            assert response.status_code == 200
            assert response.json()["loan"]["reminder_count"] == expected
            clock.advance(days=2)

        response = await client.get(f"/api/v1/reminders/{test_loan.id}/status", headers=auth_headers)
        assert response.json()["label"] == "Max reminders sent"
        assert response.json()["reminders_left"] == 0

        response = await client.post(url, headers=auth_headers)
        assert response.status_code == 409

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_paid_loan_cannot_be_reminded(self, client, auth_headers, test_loan):
        await client.post(f"/api/v1/loans/{test_loan.id}/paid", headers=auth_headers)

        response = await client.post(f"/api/v1/reminders/{test_loan.id}/sent", headers=auth_headers)
        assert response.status_code == 409
        assert "Paid" in response.json()["error"]["message"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_new_loan_in_grace_period(self, client, auth_headers, loan_payload, now):
        loan_payload["date_loaned"] = now.date().isoformat()
        created = (await client.post("/api/v1/loans", json=loan_payload, headers=auth_headers)).json()

        response = await client.post(f"/api/v1/reminders/{created['loan']['id']}/sent", headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Reminder not allowed: Wait 3 more days"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_loan(self, client, auth_headers):
        response = await client.get("/api/v1/reminders/missing/status", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "loan_not_found"
