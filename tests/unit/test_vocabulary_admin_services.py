"""
Unit tests for VocabularyService, AdminService and the Supabase auth
helpers.
"""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from app.domain.subscription import PlanType, Subscription, SubscriptionEventType, SubscriptionStatus
from app.infrastructure.exceptions import ExternalServiceError, ValidationError, VocabWorldError
from app.infrastructure.services.admin_service import AdminService
from app.infrastructure.services.supabase_auth_service import (
    AuthUser,
    SupabaseAuthService,
    build_profile_create,
)
from app.infrastructure.services.vocabulary_service import VocabularyService, load_topics


USER_ID = "11111111-2222-3333-4444-555555555555"


def _word(id, word_en, order):
    return SimpleNamespace(
        id=id,
        word_en=word_en,
        context=None,
        part_of_speech="noun",
        difficulty_level="beginner",
        example_sentence=None,
        learning_order=order,
    )


# =============================================================================
# Vocabulary
# =============================================================================

class TestVocabularyService:

    @pytest.fixture
    def repo(self):
        repo = AsyncMock()
        repo.count_by_topic.return_value = 3
        repo.list_by_topic.return_value = [_word(1, "hello", 1), _word(2, "goodbye", 2)]
        return repo

    @pytest.mark.asyncio
    async def test_english_to_spanish(self, repo):
        repo.get_translations.return_value = {1: "hola"}

        page = await VocabularyService(repo).get_page(1, "English", "Spanish", limit=2)

        repo.get_translations.assert_awaited_once_with([1, 2], "es")
        assert [i.source_word for i in page.vocabulary] == ["hello", "goodbye"]
        assert [i.target_word for i in page.vocabulary] == ["hola", "goodbye"]
        assert page.total_words == 3
        assert page.current_batch == 2
        assert page.has_more is True
        assert page.data_source == "supabase"

    @pytest.mark.asyncio
    async def test_two_foreign_languages(self, repo):
        repo.get_translations.side_effect = [{1: "bonjour", 2: "au revoir"}, {1: "hallo", 2: "tschüss"}]

        page = await VocabularyService(repo).get_page(1, "French", "German", offset=1)

        assert page.vocabulary[1].source_word == "au revoir"
        assert page.vocabulary[1].target_word == "tschüss"
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_same_language_is_empty(self, repo):
        page = await VocabularyService(repo).get_page(1, "Spanish", "es")
        assert page.vocabulary == []
        assert page.total_words == 0
        repo.list_by_topic.assert_not_called()

    @pytest.mark.asyncio
    async def test_load_topics(self, tmp_path):
        path = tmp_path / "topics.json"
        path.write_text(json.dumps([{"id": 1, "name": "Greetings"}]))
        assert await load_topics(path) == [{"id": 1, "name": "Greetings"}]

    @pytest.mark.asyncio
    async def test_load_topics_missing(self, tmp_path):
        with pytest.raises(VocabWorldError):
            await load_topics(tmp_path / "missing.json")


# =============================================================================
# Admin
# =============================================================================

class TestAdminService:

    @pytest.fixture
    def profiles(self):
        return AsyncMock()

    @pytest.fixture
    def subscriptions(self):
        service = AsyncMock()
        result = Subscription(user_id=USER_ID, status=SubscriptionStatus.ACTIVE)
        service.grant_premium.return_value = result
        service.cancel.return_value = result
        service.reactivate.return_value = result
        return service

    @pytest.fixture
    def subscription_repo(self):
        return AsyncMock()

    @pytest.fixture
    def events(self):
        return AsyncMock()

    @pytest.fixture
    def service(self, profiles, subscriptions, subscription_repo, events):
        return AdminService(profiles, subscriptions, subscription_repo, events)

    @pytest.mark.asyncio
    async def test_stats(self, service, profiles, subscription_repo, events):
        profiles.count.return_value = 100
        subscription_repo.count_by_status.return_value = 8
        events.list_event_data_since.side_effect = [
            [{"amount": 499}, {"amount": 2900}],
            [{"amount": 499}, {"amount": 2900}, {"amount": 2900}, {}],
        ]
        events.count_since.return_value = 1

        stats = await service.get_stats()

        assert stats.total_users == 100
        assert stats.active_subscriptions == 8
        assert stats.free_users == 92
        assert stats.monthly_revenue == 34
        assert stats.yearly_revenue == 63
        assert stats.churn_rate == 12
        assert events.count_since.await_args.args[0] == SubscriptionEventType.SUBSCRIPTION_CANCELLED

    @pytest.mark.asyncio
    async def test_churn_without_subscribers(self, service, profiles, subscription_repo, events):
        profiles.count.return_value = 3
        subscription_repo.count_by_status.return_value = 0
        events.list_event_data_since.return_value = []
        events.count_since.return_value = 2

        assert (await service.get_stats()).churn_rate == 0

    @pytest.mark.asyncio
    async def test_events_default_email(self, service, events):
        event = SimpleNamespace(
            id="e1",
            user_id=UUID(USER_ID),
            event_type="payment_succeeded",
            event_data=None,
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        events.list_recent.return_value = [(event, None)]

        [row] = await service.list_events(5)

        assert row.user_email == "Unknown"
        assert row.event_data == {}
        events.list_recent.assert_awaited_once_with(5)

    @pytest.mark.asyncio
    async def test_search_joins_subscriptions(self, service, profiles, subscription_repo):
        other_id = "99999999-2222-3333-4444-555555555555"
        profiles.search.return_value = [
            SimpleNamespace(auth_user_id=UUID(USER_ID), email="a@example.com", full_name="Ana"),
            SimpleNamespace(auth_user_id=UUID(other_id), email="b@example.com", full_name=None),
        ]
        subscription_repo.get_by_user_ids.return_value = {
            USER_ID: Subscription(
                id="sub-row",
                user_id=USER_ID,
                status=SubscriptionStatus.ACTIVE,
                plan_type=PlanType.YEARLY,
            )
        }

        rows = await service.search_users("  A@Example ")

        profiles.search.assert_awaited_once_with("a@example", limit=10)
        assert rows[0].user_id == USER_ID
        assert rows[0].status == "active"
        assert rows[0].plan_type == "yearly"
        assert rows[1].status == "free"
        assert rows[1].id == "no-subscription"
        assert rows[1].user_name == ""

    @pytest.mark.asyncio
    async def test_search_reports_lapsed_row_as_expired(self, service, profiles, subscription_repo):
        profiles.search.return_value = [
            SimpleNamespace(auth_user_id=UUID(USER_ID), email="a@example.com", full_name="Ana"),
        ]
        subscription_repo.get_by_user_ids.return_value = {
            USER_ID: Subscription(
                id="sub-row",
                user_id=USER_ID,
                status=SubscriptionStatus.ACTIVE,
                plan_type=PlanType.MONTHLY,
                current_period_end=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )
        }

        [row] = await service.search_users("ana")

        assert row.status == "expired"

    @pytest.mark.asyncio
    async def test_blank_search(self, service, profiles):
        assert await service.search_users("   ") == []
        profiles.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_grant_premium_defaults(self, service, subscriptions):
        result = await service.update_subscription(USER_ID, "grant_premium", None)

        subscriptions.grant_premium.assert_awaited_once_with(USER_ID, days=30, plan_type=PlanType.YEARLY)
        assert result["userId"] == USER_ID
        assert result["status"] == "active"

    @pytest.mark.asyncio
    async def test_grant_premium_with_data(self, service, subscriptions):
        await service.update_subscription(USER_ID, "grant_premium", {"days": 7, "planType": "monthly"})
        subscriptions.grant_premium.assert_awaited_once_with(USER_ID, days=7, plan_type=PlanType.MONTHLY)

    @pytest.mark.asyncio
    async def test_invalid_grant_data(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.update_subscription(USER_ID, "grant_premium", {"days": "lots"})
        assert exc_info.value.message == "Invalid grant data"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action, method", [("cancel", "cancel"), ("reactivate", "reactivate")])
    async def test_other_actions(self, service, subscriptions, action, method):
        await service.update_subscription(USER_ID, action)
        getattr(subscriptions, method).assert_awaited_once_with(USER_ID)

    @pytest.mark.asyncio
    async def test_unknown_action(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.update_subscription(USER_ID, "delete_everything")
        assert exc_info.value.message == "Invalid action"


# =============================================================================
# Supabase auth
# =============================================================================

class TestSupabaseAuth:

    def test_auth_user_properties(self):
        user = AuthUser(
            id=USER_ID,
            email="ana@example.com",
            app_metadata={"provider": "google"},
            user_metadata={"name": "Ana", "picture": "https://img", "sub": "g-123"},
        )
        assert user.provider == "google"
        assert user.full_name == "Ana"
        assert user.avatar_url == "https://img"
        assert user.provider_id == "g-123"

    def test_unknown_provider_is_email(self):
        assert AuthUser(id=USER_ID, app_metadata={"provider": "github"}).provider == "email"

    def test_build_profile_create(self):
        profile = build_profile_create(AuthUser(id=USER_ID, email="ana@example.com"))
        assert profile.auth_user_id == UUID(USER_ID)
        assert profile.full_name == "ana@example.com"
        assert profile.provider == "email"
        assert profile.provider_id == USER_ID
        assert profile.learning_languages == []

    @pytest.mark.asyncio
    async def test_get_user_by_id(self):
        client = MagicMock()
        client.auth.admin.get_user_by_id.return_value = SimpleNamespace(
            user=SimpleNamespace(id=USER_ID, email="ana@example.com", app_metadata={}, user_metadata={})
        )

        user = await SupabaseAuthService(client).get_user_by_id(USER_ID)

        assert user.email == "ana@example.com"

    @pytest.mark.asyncio
    async def test_get_user_missing(self):
        client = MagicMock()
        client.auth.admin.get_user_by_id.return_value = SimpleNamespace(user=None)
        assert await SupabaseAuthService(client).get_user_by_id(USER_ID) is None

    @pytest.mark.asyncio
    async def test_lookup_error_wrapped(self):
        client = MagicMock()
        client.auth.admin.get_user_by_id.side_effect = RuntimeError("boom")
        with pytest.raises(ExternalServiceError):
            await SupabaseAuthService(client).get_user_by_id(USER_ID)

    @pytest.mark.asyncio
    async def test_exchange_code(self):
        client = MagicMock()
        client.auth.exchange_code_for_session.return_value = SimpleNamespace(
            user=SimpleNamespace(id=USER_ID, email=None, app_metadata=None, user_metadata=None)
        )

        user = await SupabaseAuthService(client).exchange_code_for_session("code-1")

        client.auth.exchange_code_for_session.assert_called_once_with({"auth_code": "code-1"})
        assert user.id == USER_ID
        assert user.app_metadata == {}

    @pytest.mark.asyncio
    async def test_exchange_without_user(self):
        client = MagicMock()
        client.auth.exchange_code_for_session.return_value = SimpleNamespace(user=None)
        with pytest.raises(ExternalServiceError):
            await SupabaseAuthService(client).exchange_code_for_session("code-1")
