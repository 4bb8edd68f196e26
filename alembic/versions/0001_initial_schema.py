"""Initial VocabWorld schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_TABLES = (
    'user_profiles',
    'user_subscriptions',
    'user_word_progress',
    'user_topic_completion',
    'user_language_progress',
    'user_daily_progress',
    'user_login_streaks',
    'user_topic_positions',
)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=None if nullable else sa.func.now(),
        nullable=nullable,
    )


def upgrade() -> None:
    """Create profile, subscription, vocabulary and progress tables."""

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('auth_user_id', sa.Uuid, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('avatar_url', sa.String),
        sa.Column('provider', sa.String(20), server_default='email', nullable=False),
        sa.Column('provider_id', sa.String(255)),
        sa.Column('preferred_language', sa.String(10), server_default='en', nullable=False),
        sa.Column('learning_languages', sa.JSON, server_default='[]', nullable=False),
        sa.Column('subscription_status', sa.String(20), server_default='free', nullable=False),
        sa.Column('subscription_platform', sa.String(20)),
        sa.Column('subscription_id', sa.String(255)),
        sa.Column('stripe_customer_id', sa.String(255)),
        sa.Column('apple_receipt_id', sa.String),
        _timestamp('last_sign_in', nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('ix_user_profiles_auth_user_id', 'user_profiles', ['auth_user_id'], unique=True)
    op.create_index('ix_user_profiles_email', 'user_profiles', ['email'])
    op.create_index('ix_user_profiles_stripe_customer_id', 'user_profiles', ['stripe_customer_id'])

    # Subscriptions
    op.create_table(
        'user_subscriptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.String(20), server_default='free', nullable=False),
        sa.Column('plan_type', sa.String(20)),
        sa.Column('stripe_customer_id', sa.String),
        sa.Column('stripe_subscription_id', sa.String),
        _timestamp('current_period_start', nullable=True),
        _timestamp('current_period_end', nullable=True),
        _timestamp('trial_end', nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('ix_user_subscriptions_user_id', 'user_subscriptions', ['user_id'], unique=True)
    op.create_index('ix_user_subscriptions_status', 'user_subscriptions', ['status'])
    op.create_index('ix_user_subscriptions_stripe_customer_id', 'user_subscriptions', ['stripe_customer_id'])
    op.create_index(
        'ix_user_subscriptions_stripe_subscription_id',
        'user_subscriptions',
        ['stripe_subscription_id'],
        unique=True,
    )

    op.create_table(
        'subscription_events',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('event_data', postgresql.JSONB, server_default='{}'),
        _timestamp('created_at'),
    )
    op.create_index('ix_subscription_events_user_id', 'subscription_events', ['user_id'])
    op.create_index('ix_subscription_events_event_type', 'subscription_events', ['event_type'])
    op.create_index('ix_subscription_events_created_at', 'subscription_events', ['created_at'])

    op.create_table(
        'user_access_log',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('topic_id', sa.Integer, nullable=False),
        sa.Column('access_granted', sa.Boolean, nullable=False),
        sa.Column('user_agent', sa.String),
        _timestamp('accessed_at'),
    )
    op.create_index('ix_user_access_log_user_id', 'user_access_log', ['user_id'])
    op.create_index('ix_user_access_log_topic_id', 'user_access_log', ['topic_id'])

    # Stripe webhook replay protection
    op.create_table(
        'processed_webhook_events',
        sa.Column('event_id', sa.String(255), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False),
        _timestamp('processed_at'),
    )
    op.create_index(
        'ix_processed_webhook_events_processed_at',
        'processed_webhook_events',
        ['processed_at'],
    )

    # Vocabulary
    op.create_table(
        'vocabulary',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('topic_id', sa.Integer, nullable=False),
        sa.Column('word_en', sa.String(255), nullable=False),
        sa.Column('context', sa.String),
        sa.Column('part_of_speech', sa.String(50)),
        sa.Column('difficulty_level', sa.String(20)),
        sa.Column('example_sentence', sa.String),
        sa.Column('learning_order', sa.Integer),
    )
    op.create_index('ix_vocabulary_topic_id', 'vocabulary', ['topic_id'])
    op.create_index('ix_vocabulary_learning_order', 'vocabulary', ['learning_order'])

    op.create_table(
        'vocabulary_translations',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('vocabulary_id', sa.Integer, sa.ForeignKey('vocabulary.id'), nullable=False),
        sa.Column('language_code', sa.String(10), nullable=False),
        sa.Column('translated_word', sa.String(255), nullable=False),
        sa.UniqueConstraint('vocabulary_id', 'language_code', name='uq_vocabulary_translation'),
    )
    op.create_index('ix_vocabulary_translations_vocabulary_id', 'vocabulary_translations', ['vocabulary_id'])
    op.create_index('ix_vocabulary_translations_language_code', 'vocabulary_translations', ['language_code'])

    # Progress
    op.create_table(
        'user_word_progress',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('vocabulary_id', sa.Integer, sa.ForeignKey('vocabulary.id'), nullable=False),
        sa.Column('target_language_code', sa.String(10), nullable=False),
        sa.Column('play_count', sa.Integer, server_default='1', nullable=False),
        _timestamp('first_played_at'),
        _timestamp('last_played_at'),
        sa.UniqueConstraint(
            'user_id', 'vocabulary_id', 'target_language_code',
            name='uq_user_word_progress',
        ),
    )
    op.create_index('ix_user_word_progress_user_id', 'user_word_progress', ['user_id'])
    op.create_index('ix_user_word_progress_vocabulary_id', 'user_word_progress', ['vocabulary_id'])

    op.create_table(
        'user_topic_completion',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('topic_id', sa.Integer, nullable=False),
        sa.Column('target_language_code', sa.String(10), nullable=False),
        sa.Column('words_learned', sa.Integer, server_default='0', nullable=False),
        sa.Column('total_words', sa.Integer, server_default='0', nullable=False),
        sa.Column('is_completed', sa.Boolean, server_default='false', nullable=False),
        _timestamp('completed_at', nullable=True),
        _timestamp('updated_at'),
        sa.UniqueConstraint(
            'user_id', 'topic_id', 'target_language_code',
            name='uq_user_topic_completion',
        ),
    )
    op.create_index('ix_user_topic_completion_user_id', 'user_topic_completion', ['user_id'])

    op.create_table(
        'user_language_progress',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('target_language_code', sa.String(10), nullable=False),
        sa.Column('total_words_learned', sa.Integer, server_default='0', nullable=False),
        sa.Column('completion_percentage', sa.Float, server_default='0', nullable=False),
        _timestamp('updated_at'),
        sa.UniqueConstraint('user_id', 'target_language_code', name='uq_user_language_progress'),
    )
    op.create_index('ix_user_language_progress_user_id', 'user_language_progress', ['user_id'])

    op.create_table(
        'user_daily_progress',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('target_language_code', sa.String(10), nullable=False),
        sa.Column('activity_date', sa.Date, nullable=False),
        sa.Column('words_learned_count', sa.Integer, server_default='0', nullable=False),
        sa.UniqueConstraint(
            'user_id', 'target_language_code', 'activity_date',
            name='uq_user_daily_progress',
        ),
    )
    op.create_index('ix_user_daily_progress_user_id', 'user_daily_progress', ['user_id'])

    op.create_table(
        'user_login_streaks',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('current_streak', sa.Integer, server_default='0', nullable=False),
        sa.Column('longest_streak', sa.Integer, server_default='0', nullable=False),
        sa.Column('last_login_date', sa.Date),
        _timestamp('updated_at'),
    )
    op.create_index('ix_user_login_streaks_user_id', 'user_login_streaks', ['user_id'], unique=True)

    op.create_table(
        'user_topic_positions',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, nullable=False),
        sa.Column('topic_id', sa.Integer, nullable=False),
        sa.Column('target_language_code', sa.String(10), nullable=False),
        sa.Column('current_word_index', sa.Integer, server_default='0', nullable=False),
        sa.Column('total_words', sa.Integer, server_default='0', nullable=False),
        _timestamp('last_accessed_at'),
        sa.UniqueConstraint(
            'user_id', 'topic_id', 'target_language_code',
            name='uq_user_topic_position',
        ),
    )
    op.create_index('ix_user_topic_positions_user_id', 'user_topic_positions', ['user_id'])

    # Row level security: users read their own rows, the service role manages all
    for table in USER_TABLES:
        owner_column = 'auth_user_id' if table == 'user_profiles' else 'user_id'
        op.execute(f'ALTER TABLE {table} ENABLE ROW LEVEL SECURITY')
        op.execute(f"""
            CREATE POLICY "Users can view own rows"
            ON {table} FOR SELECT
            TO authenticated
            USING ({owner_column} = auth.uid())
        """)
        op.execute(f"""
            CREATE POLICY "Service role manages rows"
            ON {table} FOR ALL
            TO service_role
            USING (true)
            WITH CHECK (true)
        """)


def downgrade() -> None:
    for table in (
        'user_topic_positions',
        'user_login_streaks',
        'user_daily_progress',
        'user_language_progress',
        'user_topic_completion',
        'user_word_progress',
        'vocabulary_translations',
        'vocabulary',
        'processed_webhook_events',
        'user_access_log',
        'subscription_events',
        'user_subscriptions',
        'user_profiles',
    ):
        op.drop_table(table)
