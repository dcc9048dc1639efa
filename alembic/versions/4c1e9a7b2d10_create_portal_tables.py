"""create_portal_tables

Revision ID: 4c1e9a7b2d10
Revises:
Create Date: 2026-10-19 09:12:31.418204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e9a7b2d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Members and roles
    op.create_table(
        'members',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('auth_id', sa.String(length=64), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=120), nullable=True),
        sa.Column('last_name', sa.String(length=120), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('postal_code', sa.String(length=20), nullable=True),
        sa.Column('city', sa.String(length=120), nullable=True),
        sa.Column('dob', sa.Date(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('start_year', sa.Integer(), nullable=True),
        sa.Column('guardian_name', sa.String(length=200), nullable=True),
        sa.Column('guardian_phone', sa.String(length=50), nullable=True),
        sa.Column('guardian_email', sa.String(length=255), nullable=True),
        sa.Column('allergies', sa.Text(), nullable=True),
        sa.Column('medical_info', sa.Text(), nullable=True),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.String(length=1024), nullable=True),
        sa.Column('archived', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_members_auth_id'), 'members', ['auth_id'], unique=True)
    op.create_index(op.f('ix_members_email'), 'members', ['email'], unique=True)

    op.create_table(
        'member_roles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('member_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='member', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('member_id', 'role', name='uq_member_role')
    )
    op.create_index(op.f('ix_member_roles_member_id'), 'member_roles', ['member_id'], unique=False)

    # Activities
    op.create_table(
        'activities',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=20), server_default='offer', nullable=False),
        sa.Column('code', sa.String(length=64), nullable=True),
        sa.Column('slug', sa.String(length=128), nullable=True),
        sa.Column('legacy_id', sa.String(length=64), nullable=True),
        sa.Column('season', sa.String(length=64), nullable=True),
        sa.Column('weekday', sa.String(length=32), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('event_date', sa.Date(), nullable=True),
        sa.Column('has_guests', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('has_attendance', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('has_volunteers', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('has_tasks', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('archived', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activities_code'), 'activities', ['code'], unique=False)
    op.create_index(op.f('ix_activities_slug'), 'activities', ['slug'], unique=False)
    op.create_index(op.f('ix_activities_legacy_id'), 'activities', ['legacy_id'], unique=False)

    op.create_table(
        'enrollments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('member_id', sa.String(length=36), nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='participant', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('member_id', 'activity_id', name='uq_enrollment_member_activity')
    )
    op.create_index(op.f('ix_enrollments_member_id'), 'enrollments', ['member_id'], unique=False)
    op.create_index(op.f('ix_enrollments_activity_id'), 'enrollments', ['activity_id'], unique=False)

    op.create_table(
        'member_activity_history',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('member_id', sa.String(length=36), nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_member_activity_history_member_id'), 'member_activity_history', ['member_id'], unique=False)
    op.create_index(op.f('ix_member_activity_history_activity_id'), 'member_activity_history', ['activity_id'], unique=False)

    # Sessions and the per-member calendar
    op.create_table(
        'sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('target_member_ids', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sessions_activity_id'), 'sessions', ['activity_id'], unique=False)

    op.create_table(
        'calendar_entries',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('member_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('source', sa.String(length=20), server_default='session', nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=True),
        sa.Column('session_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_calendar_entries_member_id'), 'calendar_entries', ['member_id'], unique=False)
    op.create_index(op.f('ix_calendar_entries_activity_id'), 'calendar_entries', ['activity_id'], unique=False)
    op.create_index(op.f('ix_calendar_entries_session_id'), 'calendar_entries', ['session_id'], unique=False)

    op.create_table(
        'messages',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('scope', sa.String(length=20), nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=True),
        sa.Column('member_id', sa.String(length=36), nullable=True),
        sa.Column('target', sa.String(length=20), server_default='all', nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_by_email', sa.String(length=255), nullable=True),
        sa.Column('created_by_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_messages_activity_id'), 'messages', ['activity_id'], unique=False)
    op.create_index(op.f('ix_messages_member_id'), 'messages', ['member_id'], unique=False)

    # Guests, volunteers and tasks
    op.create_table(
        'activity_guests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=120), nullable=False),
        sa.Column('last_name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('is_norwegian', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('present', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('present_marked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activity_guests_activity_id'), 'activity_guests', ['activity_id'], unique=False)

    op.create_table(
        'activity_guest_children',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('guest_id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=120), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activity_guest_children_guest_id'), 'activity_guest_children', ['guest_id'], unique=False)

    op.create_table(
        'activity_volunteers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=False),
        sa.Column('member_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=120), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activity_volunteers_activity_id'), 'activity_volunteers', ['activity_id'], unique=False)
    op.create_index(op.f('ix_activity_volunteers_member_id'), 'activity_volunteers', ['member_id'], unique=False)

    op.create_table(
        'activity_tasks',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('activity_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='todo', nullable=False),
        sa.Column('assigned_member_id', sa.String(length=36), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activity_tasks_activity_id'), 'activity_tasks', ['activity_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_activity_tasks_activity_id'), table_name='activity_tasks')
    op.drop_table('activity_tasks')
    op.drop_index(op.f('ix_activity_volunteers_member_id'), table_name='activity_volunteers')
    op.drop_index(op.f('ix_activity_volunteers_activity_id'), table_name='activity_volunteers')
    op.drop_table('activity_volunteers')
    op.drop_index(op.f('ix_activity_guest_children_guest_id'), table_name='activity_guest_children')
    op.drop_table('activity_guest_children')
    op.drop_index(op.f('ix_activity_guests_activity_id'), table_name='activity_guests')
    op.drop_table('activity_guests')
    op.drop_index(op.f('ix_messages_member_id'), table_name='messages')
    op.drop_index(op.f('ix_messages_activity_id'), table_name='messages')
    op.drop_table('messages')
    op.drop_index(op.f('ix_calendar_entries_session_id'), table_name='calendar_entries')
    op.drop_index(op.f('ix_calendar_entries_activity_id'), table_name='calendar_entries')
    op.drop_index(op.f('ix_calendar_entries_member_id'), table_name='calendar_entries')
    op.drop_table('calendar_entries')
    op.drop_index(op.f('ix_sessions_activity_id'), table_name='sessions')
    op.drop_table('sessions')
    op.drop_index(op.f('ix_member_activity_history_activity_id'), table_name='member_activity_history')
    op.drop_index(op.f('ix_member_activity_history_member_id'), table_name='member_activity_history')
    op.drop_table('member_activity_history')
    op.drop_index(op.f('ix_enrollments_activity_id'), table_name='enrollments')
    op.drop_index(op.f('ix_enrollments_member_id'), table_name='enrollments')
    op.drop_table('enrollments')
    op.drop_index(op.f('ix_activities_legacy_id'), table_name='activities')
    op.drop_index(op.f('ix_activities_slug'), table_name='activities')
    op.drop_index(op.f('ix_activities_code'), table_name='activities')
    op.drop_table('activities')
    op.drop_index(op.f('ix_member_roles_member_id'), table_name='member_roles')
    op.drop_table('member_roles')
    op.drop_index(op.f('ix_members_email'), table_name='members')
    op.drop_index(op.f('ix_members_auth_id'), table_name='members')
    op.drop_table('members')
