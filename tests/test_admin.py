"""
Integration Tests for Admin Routes

Verifies API key protection and the dashboard endpoints with a mocked
AdminService.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from app.api.routes import admin as admin_routes
from app.domain.admin import AdminEvent, AdminStats, AdminUserRow
from app.infrastructure.exceptions import ValidationError


USER_ID = "11111111-2222-3333-4444-555555555555"


@pytest.fixture
def mock_admin_service(app):
    service = AsyncMock()
    app.dependency_overrides[admin_routes.get_admin_service] = lambda: service
    return service


class TestAdminAuth:

    def test_missing_key(self, client, mock_admin_service):
        assert client.get("/api/admin/stats").status_code == 422

    def test_wrong_key(self, client, mock_admin_service):
        response = client.get("/api/admin/stats", headers={"X-Admin-Key": "nope"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid admin API key"

    def test_not_configured(self, client, mock_admin_service, monkeypatch):
        monkeypatch.setattr(admin_routes.settings, "admin_api_key", None)

        response = client.get("/api/admin/stats", headers={"X-Admin-Key": "anything"})

        assert response.status_code == 503


class TestAdminEndpoints:

    def test_stats(self, client, admin_headers, mock_admin_service):
        mock_admin_service.get_stats.return_value = AdminStats(
            total_users=100,
            active_subscriptions=8,
            free_users=92,
            monthly_revenue=34,
            yearly_revenue=63,
            churn_rate=12,
        )

        response = client.get("/api/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["churnRate"] == 12
        assert response.json()["freeUsers"] == 92

    def test_stats_failure(self, client, admin_headers, mock_admin_service):
        mock_admin_service.get_stats.side_effect = RuntimeError("db down")

        response = client.get("/api/admin/stats", headers=admin_headers)

        assert response.status_code == 500

    def test_events(self, client, admin_headers, mock_admin_service):
        mock_admin_service.list_events.return_value = [
            AdminEvent(
                id="e1",
                user_id=USER_ID,
                event_type="payment_succeeded",
                event_data={"amount": 499},
                created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
            )
        ]

        response = client.get("/api/admin/events", params={"limit": 5}, headers=admin_headers)

        assert response.status_code == 200
        [event] = response.json()["events"]
        assert event["userEmail"] == "Unknown"
        assert event["eventData"] == {"amount": 499}
        mock_admin_service.list_events.assert_awaited_once_with(5)

    def test_events_limit_bounds(self, client, admin_headers, mock_admin_service):
        response = client.get("/api/admin/events", params={"limit": 0}, headers=admin_headers)
        assert response.status_code == 422

    def test_user_search(self, client, admin_headers, mock_admin_service):
        mock_admin_service.search_users.return_value = [
            AdminUserRow(user_id=USER_ID, user_email="ana@example.com")
        ]

        response = client.get("/api/admin/user-search", params={"query": "ana"}, headers=admin_headers)

        [row] = response.json()["users"]
        assert row["id"] == "no-subscription"
        assert row["status"] == "free"
        mock_admin_service.search_users.assert_awaited_once_with("ana")

    def test_subscription_update(self, client, admin_headers, mock_admin_service):
        mock_admin_service.update_subscription.return_value = {"userId": USER_ID, "status": "active"}

        response = client.post(
            "/api/admin/subscription-update",
            json={"userId": USER_ID, "action": "grant_premium", "data": {"days": 7}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "action": "grant_premium",
            "userId": USER_ID,
            "result": {"userId": USER_ID, "status": "active"},
        }
        mock_admin_service.update_subscription.assert_awaited_once_with(USER_ID, "grant_premium", {"days": 7})

    def test_invalid_action(self, client, admin_headers, mock_admin_service):
        mock_admin_service.update_subscription.side_effect = ValidationError("Invalid action")

        response = client.post(
            "/api/admin/subscription-update",
            json={"userId": USER_ID, "action": "delete"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid action"
