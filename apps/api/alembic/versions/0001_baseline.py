"""Baseline migration - users, clients, firms, assignments, tasks, approvals

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-17

Creates the full schema. There is no organizations table: an organization
is derived from users.reports_to_user_id at request time.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    # ==========================================================================
    # Users (reporting hierarchy)
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column(
            'reports_to_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('token_version', sa.Integer(), server_default=sa.text('1'), nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_users_reports_to', 'users', ['reports_to_user_id'])

    # ==========================================================================
    # Clients and firms
    # ==========================================================================
    op.create_table(
        'clients',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column(
            'created_by_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index('idx_clients_created_by', 'clients', ['created_by_user_id'])

    op.create_table(
        'firms',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'client_id', sa.Uuid(),
            sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=True),
        sa.Column('pan', sa.String(20), nullable=True),
        sa.Column('gstin', sa.String(20), nullable=True),
        sa.Column('gst_applicable', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('tds_applicable', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('roc_applicable', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            'created_by_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index('idx_firms_created_by', 'firms', ['created_by_user_id'])
    op.create_index('idx_firms_client', 'firms', ['client_id'])

    op.create_table(
        'user_firm_mappings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'firm_id', sa.Uuid(),
            sa.ForeignKey('firms.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'assigned_by_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'firm_id', name='uq_user_firm_mapping'),
    )
    op.create_index('idx_user_firm_mappings_firm', 'user_firm_mappings', ['firm_id'])

    # ==========================================================================
    # Tasks and approvals
    # ==========================================================================
    op.create_table(
        'tasks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'firm_id', sa.Uuid(),
            sa.ForeignKey('firms.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'assigned_to_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False,
        ),
        sa.Column(
            'created_by_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False,
        ),
        sa.Column('priority', sa.String(20), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_tasks_firm_status', 'tasks', ['firm_id', 'status'])
    op.create_index('idx_tasks_assigned_to', 'tasks', ['assigned_to_user_id'])
    op.create_index('idx_tasks_due', 'tasks', ['due_date'])

    op.create_table(
        'approvals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'task_id', sa.Uuid(),
            sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, unique=True,
        ),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column(
            'requested_by_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False,
        ),
        sa.Column(
            'approved_by_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_approvals_status', 'approvals', ['status'])


def downgrade() -> None:
    """Drop all tables (reverse dependency order)."""
    op.drop_table('approvals')
    op.drop_table('tasks')
    op.drop_table('user_firm_mappings')
    op.drop_table('firms')
    op.drop_table('clients')
    op.drop_table('users')
