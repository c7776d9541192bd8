"""initial_schema

Revision ID: 3a1c9e7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a1c9e7d2b10'
down_revision = None
branch_labels = None
depends_on = None

notification_type = sa.Enum('AZAN', 'GENERAL', 'EVENT', 'ANNOUNCEMENT', name='notification_type')


def upgrade() -> None:
    # Device registry
    op.create_table(
        'device_tokens',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('token', sa.String(length=500), nullable=False),
        sa.Column('device_id', sa.String(length=255), nullable=True),
        sa.Column('platform', sa.String(length=50), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=True),
        sa.Column('enable_prayer_notifications', sa.Boolean(), nullable=False),
        sa.Column('enable_event_notifications', sa.Boolean(), nullable=False),
        sa.Column('notify_before_prayer', sa.Integer(), nullable=False),
        sa.Column('enabled_prayers', sa.JSON(), nullable=True),
        sa.Column('last_active_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_device_tokens_token', 'device_tokens', ['token'], unique=True)

    # Notification schedule
    op.create_table(
        'notification_schedules',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('schedule_at', sa.DateTime(), nullable=False),
        sa.Column('sent', sa.Boolean(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('claimed_until', sa.DateTime(), nullable=True),
        sa.Column('device_token_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['device_token_id'], ['device_tokens.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notification_schedules_type', 'notification_schedules', ['type'])
    op.create_index('ix_notification_schedules_schedule_at', 'notification_schedules', ['schedule_at'])
    op.create_index('ix_notification_schedules_sent', 'notification_schedules', ['sent'])
    op.create_index('ix_notification_schedules_device_token_id', 'notification_schedules', ['device_token_id'])

    # Caches
    op.create_table(
        'prayer_cache',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('fajr', sa.String(length=16), nullable=False),
        sa.Column('dhuhr', sa.String(length=16), nullable=False),
        sa.Column('asr', sa.String(length=16), nullable=False),
        sa.Column('maghrib', sa.String(length=16), nullable=False),
        sa.Column('isha', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_prayer_cache_date', 'prayer_cache', ['date'], unique=True)

    op.create_table(
        'location_cache',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lon', sa.Float(), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('state', sa.String(length=255), nullable=True),
        sa.Column('country', sa.String(length=255), nullable=True),
        sa.Column('country_code', sa.String(length=8), nullable=True),
        sa.Column('postal_code', sa.String(length=32), nullable=True),
        sa.Column('display_name', sa.String(length=1000), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lat', 'lon', name='uq_location_cache_lat_lon')
    )
    op.create_index('ix_location_cache_created_at', 'location_cache', ['created_at'])

    # Events
    op.create_table(
        'islamic_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date_hijri', sa.String(length=100), nullable=False),
        sa.Column('estimated_gregorian', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_islamic_events_estimated_gregorian', 'islamic_events', ['estimated_gregorian'])

    # Quran
    op.create_table(
        'surahs',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('english_name', sa.String(length=255), nullable=False),
        sa.Column('number_of_ayahs', sa.Integer(), nullable=False),
        sa.Column('revelation_type', sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'ayahs',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('surah_id', sa.Integer(), nullable=False),
        sa.Column('number_in_surah', sa.Integer(), nullable=False),
        sa.Column('juz', sa.Integer(), nullable=True),
        sa.Column('page', sa.Integer(), nullable=True),
        sa.Column('text_arabic', sa.Text(), nullable=False),
        sa.Column('text_latin', sa.Text(), nullable=True),
        sa.Column('text_translation', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['surah_id'], ['surahs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('surah_id', 'number_in_surah', name='uq_ayah_surah_number')
    )
    op.create_index('ix_ayahs_surah_id', 'ayahs', ['surah_id'])


def downgrade() -> None:
    op.drop_index('ix_ayahs_surah_id', table_name='ayahs')
    op.drop_table('ayahs')
    op.drop_table('surahs')
    op.drop_index('ix_islamic_events_estimated_gregorian', table_name='islamic_events')
    op.drop_table('islamic_events')
    op.drop_index('ix_location_cache_created_at', table_name='location_cache')
    op.drop_table('location_cache')
    op.drop_index('ix_prayer_cache_date', table_name='prayer_cache')
    op.drop_table('prayer_cache')
    op.drop_index('ix_notification_schedules_device_token_id', table_name='notification_schedules')
    op.drop_index('ix_notification_schedules_sent', table_name='notification_schedules')
    op.drop_index('ix_notification_schedules_schedule_at', table_name='notification_schedules')
    op.drop_index('ix_notification_schedules_type', table_name='notification_schedules')
    op.drop_table('notification_schedules')
    notification_type.drop(op.get_bind(), checkfirst=True)
    op.drop_index('ix_device_tokens_token', table_name='device_tokens')
    op.drop_table('device_tokens')
