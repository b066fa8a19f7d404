"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

Accounts, sessions, volunteer team applications, team membership links,
signup attribution, audit log, status history and notifications.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('school', sa.String(150), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='guest'),
        sa.Column('department', sa.String(50), nullable=True),
        sa.Column('subrole', sa.String(50), nullable=True),
        sa.Column('user_category', sa.String(30), nullable=True),
        sa.Column('hashed_password', sa.String(255), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('must_change_password', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_seen_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('session_token', sa.String(64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_sessions_user_id', 'user_sessions', ['user_id'])
    op.create_index('ix_user_sessions_session_token', 'user_sessions', ['session_token'], unique=True)

    op.create_table(
        'volunteer_teams',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_name', sa.String(150), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('primary_contact_phone', sa.String(30), nullable=True),
        sa.Column('group_members', sa.JSON(), nullable=True),
        sa.Column('application_status', sa.String(20), nullable=False, server_default='submitted'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('onboarding_step', sa.String(30), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_volunteer_teams_email', 'volunteer_teams', ['email'])
    op.create_index('ix_volunteer_teams_application_status', 'volunteer_teams', ['application_status'])

    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('volunteer_team_id', sa.Integer(), sa.ForeignKey('volunteer_teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('member_name', sa.String(100), nullable=False),
        sa.Column('member_email', sa.String(255), nullable=False),
        sa.Column('member_phone', sa.String(30), nullable=True),
        sa.Column('member_school', sa.String(150), nullable=True),
        sa.Column('is_primary_contact', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint('volunteer_team_id', 'user_id', name='uq_team_member_team_user'),
    )
    op.create_index('ix_team_members_volunteer_team_id', 'team_members', ['volunteer_team_id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'])

    op.create_table(
        'user_signup_sources',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('source_type', sa.String(30), nullable=False),
        sa.Column('source_reference_id', sa.Integer(), nullable=True),
        sa.Column('source_metadata', sa.JSON(), nullable=False),
        sa.Column('first_signup_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'source_type', name='uq_signup_source_user_type'),
    )
    op.create_index('ix_user_signup_sources_user_id', 'user_signup_sources', ['user_id'])

    op.create_table(
        'system_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('actor_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_system_logs_event_type', 'system_logs', ['event_type'])

    op.create_table(
        'application_status_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_type', sa.String(20), nullable=False, server_default='volunteer'),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('old_status', sa.String(20), nullable=True),
        sa.Column('new_status', sa.String(20), nullable=False),
        sa.Column('changed_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_application_status_history_application_id', 'application_status_history', ['application_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('notification_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('action_url', sa.String(255), nullable=True),
        sa.Column('related_id', sa.Integer(), nullable=True),
        sa.Column('related_type', sa.String(30), nullable=True),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('application_status_history')
    op.drop_table('system_logs')
    op.drop_table('user_signup_sources')
    op.drop_table('team_members')
    op.drop_table('volunteer_teams')
    op.drop_table('user_sessions')
    op.drop_table('users')
