"""Initial schema - profiles, deals, workflow rules, notifications, tasks, callbacks

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    """Create all engine tables."""

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='client'),
        sa.Column(
            'assigned_broker_id',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='SET NULL'),
            nullable=True,
        ),
        _timestamp('created_at'),
    )

    op.create_table(
        'deals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=True),
        sa.Column('loan_type', sa.String(30), nullable=False, server_default='bridging'),
        sa.Column('status', sa.String(30), nullable=False, server_default='draft'),
        sa.Column(
            'client_id',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column(
            'created_by_user_id',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='SET NULL'),
            nullable=True,
        ),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_deals_status_updated', 'deals', ['status', 'updated_at'])
    op.create_index('idx_deals_client', 'deals', ['client_id'])

    op.create_table(
        'deal_activity_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'deal_id', sa.Uuid(), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column(
            'user_id', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True
        ),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('event_type', sa.String(30), nullable=True),
        sa.Column('details', JSON_TYPE, nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('idx_activity_deal_created', 'deal_activity_logs', ['deal_id', 'created_at'])

    op.create_table(
        'communication_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'deal_id', sa.Uuid(), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column(
            'user_id', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True
        ),
        sa.Column('communication_type', sa.String(20), nullable=False),
        sa.Column('direction', sa.String(20), nullable=True),
        sa.Column('subject', sa.String(255), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('status', sa.String(30), nullable=True),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.Column('email_address', sa.String(255), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('idx_comm_deal_created', 'communication_logs', ['deal_id', 'created_at'])

    op.create_table(
        'workflow_rules',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('trigger_type', sa.String(50), nullable=False, server_default='status_change'),
        sa.Column('trigger_conditions', JSON_TYPE, nullable=False),
        sa.Column('actions', JSON_TYPE, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            'created_by',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='SET NULL'),
            nullable=True,
        ),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index(
        'idx_wf_rules_trigger_active', 'workflow_rules', ['trigger_type', 'is_active']
    )

    op.create_table(
        'workflow_executions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'workflow_rule_id',
            sa.Uuid(),
            sa.ForeignKey('workflow_rules.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column(
            'deal_id', sa.Uuid(), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column('trigger_data', JSON_TYPE, nullable=False),
        sa.Column('actions_executed', JSON_TYPE, nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=True),
        _timestamp('executed_at'),
    )
    op.create_index(
        'idx_wf_exec_rule', 'workflow_executions', ['workflow_rule_id', 'executed_at']
    )
    op.create_index('idx_wf_exec_deal', 'workflow_executions', ['deal_id', 'executed_at'])

    op.create_table(
        'automated_tasks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'deal_id', sa.Uuid(), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'assigned_to',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        _timestamp('due_date', nullable=True),
        _timestamp('completed_at', nullable=True),
        sa.Column(
            'workflow_rule_id',
            sa.Uuid(),
            sa.ForeignKey('workflow_rules.id', ondelete='SET NULL'),
            nullable=True,
        ),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_tasks_deal', 'automated_tasks', ['deal_id', 'created_at'])
    op.create_index('idx_tasks_assignee_status', 'automated_tasks', ['assigned_to', 'status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'user_id', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='info'),
        sa.Column(
            'related_deal_id',
            sa.Uuid(),
            sa.ForeignKey('deals.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column(
            'related_task_id',
            sa.Uuid(),
            sa.ForeignKey('automated_tasks.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp('read_at', nullable=True),
        _timestamp('created_at'),
    )
    op.create_index(
        'idx_notif_user_unread', 'notifications', ['user_id', 'is_read', 'created_at']
    )
    op.create_index(
        'idx_notif_deal_type', 'notifications', ['related_deal_id', 'type', 'created_at']
    )

    op.create_table(
        'notification_preferences',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'user_id',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='CASCADE'),
            nullable=False,
            unique=True,
        ),
        sa.Column('email_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sms_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deal_status_updates', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('document_requests', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('idle_deal_alerts', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('task_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            'workflow_notifications', sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        _timestamp('updated_at'),
    )

    op.create_table(
        'scheduled_callbacks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'scheduled_by',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'scheduled_with',
            sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column(
            'deal_id', sa.Uuid(), sa.ForeignKey('deals.id', ondelete='SET NULL'), nullable=True
        ),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        _timestamp('completed_at', nullable=True),
        sa.Column('reminder_24h_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reminder_1h_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reminder_10m_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp('created_at'),
    )
    op.create_index(
        'idx_callbacks_status_time', 'scheduled_callbacks', ['status', 'scheduled_at']
    )


def downgrade() -> None:
    for table in (
        'scheduled_callbacks',
        'notification_preferences',
        'notifications',
        'automated_tasks',
        'workflow_executions',
        'workflow_rules',
        'communication_logs',
        'deal_activity_logs',
        'deals',
        'profiles',
    ):
        op.drop_table(table)
