"""Initial schema: connections, sync configurations, field mappings, sync events, audit logs

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('connections',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('label', sa.String(length=255), nullable=False),
    sa.Column('api_name', sa.String(length=80), nullable=False),
    sa.Column('account_id', sa.String(length=100), nullable=True),
    sa.Column('passcode', sa.Text(), nullable=True),
    sa.Column('region', sa.String(length=10), nullable=True),
    sa.Column('api_url', sa.String(length=255), nullable=True),
    sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.text('false')),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_connections_id'), 'connections', ['id'], unique=False)
    op.create_index(op.f('ix_connections_api_name'), 'connections', ['api_name'], unique=True)
    op.create_index(op.f('ix_connections_is_deleted'), 'connections', ['is_deleted'], unique=False)

    op.create_table('sync_configurations',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('source_entity', sa.String(length=100), nullable=False),
    sa.Column('target_entity', sa.String(length=100), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('direction', sa.String(length=20), nullable=False),
    sa.Column('connection_name', sa.String(length=80), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sync_configurations_id'), 'sync_configurations', ['id'], unique=False)
    op.create_index(op.f('ix_sync_configurations_source_entity'), 'sync_configurations', ['source_entity'], unique=False)
    op.create_index(op.f('ix_sync_configurations_status'), 'sync_configurations', ['status'], unique=False)
    op.create_index(op.f('ix_sync_configurations_connection_name'), 'sync_configurations', ['connection_name'], unique=False)
    op.create_index('idx_sync_configurations_source_status', 'sync_configurations', ['source_entity', 'status'], unique=False)

    op.create_table('field_mappings',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('sync_configuration_id', sa.Integer(), nullable=False),
    sa.Column('source_field', sa.String(length=255), nullable=False),
    sa.Column('target_field', sa.String(length=255), nullable=False),
    sa.Column('data_type', sa.String(length=20), nullable=False),
    sa.Column('is_mandatory', sa.Boolean(), nullable=False),
    sa.Column('position', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['sync_configuration_id'], ['sync_configurations.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_field_mappings_id'), 'field_mappings', ['id'], unique=False)
    op.create_index(op.f('ix_field_mappings_sync_configuration_id'), 'field_mappings', ['sync_configuration_id'], unique=False)

    op.create_table('sync_events',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('record_id', sa.String(length=100), nullable=True),
    sa.Column('record_type', sa.String(length=100), nullable=True),
    sa.Column('account_id', sa.String(length=100), nullable=True),
    sa.Column('contact_id', sa.String(length=100), nullable=True),
    sa.Column('lead_id', sa.String(length=100), nullable=True),
    sa.Column('opportunity_id', sa.String(length=100), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('response_trace', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sync_events_id'), 'sync_events', ['id'], unique=False)
    op.create_index(op.f('ix_sync_events_record_id'), 'sync_events', ['record_id'], unique=False)
    op.create_index(op.f('ix_sync_events_record_type'), 'sync_events', ['record_type'], unique=False)
    op.create_index(op.f('ix_sync_events_status'), 'sync_events', ['status'], unique=False)
    op.create_index(op.f('ix_sync_events_created_at'), 'sync_events', ['created_at'], unique=False)
    op.create_index('idx_sync_events_record_type_status', 'sync_events', ['record_type', 'status'], unique=False)

    op.create_table('audit_logs',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('action', sa.String(length=100), nullable=False),
    sa.Column('entity_type', sa.String(length=50), nullable=True),
    sa.Column('entity_id', sa.Integer(), nullable=True),
    sa.Column('user', sa.String(length=100), nullable=True),
    sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column('ip_address', sa.String(length=45), nullable=True),
    sa.Column('user_agent', sa.String(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)
    op.create_index(op.f('ix_audit_logs_created_at'), 'audit_logs', ['created_at'], unique=False)
    op.create_index('idx_audit_logs_action', 'audit_logs', ['action'], unique=False)
    op.create_index('idx_audit_logs_ip_created', 'audit_logs', ['ip_address', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('sync_events')
    op.drop_table('field_mappings')
    op.drop_table('sync_configurations')
    op.drop_table('connections')
