"""admin accounts, permission settings, purchase orders, audit logs

Revision ID: 0001_initial_permissions
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_permissions'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('admin_accounts',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('phone', sa.String(length=32)),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('level', sa.String(length=32), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_admin_accounts_email', 'admin_accounts', ['email'])

    op.create_table('permission_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('resource', sa.String(length=64), nullable=False),
        sa.Column('level', sa.String(length=32), nullable=False),
        sa.Column('can_read', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('can_write', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('can_delete', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('resource', 'level', name='uq_permission_resource_level')
    )
    op.create_index('ix_permission_settings_resource', 'permission_settings', ['resource'])

    op.create_table('purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('po_number', sa.String(length=32), nullable=False, unique=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('back_margin', sa.Numeric(12, 2), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('commission_type', sa.String(length=32), nullable=True),
        sa.Column('commission_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('shipping_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('warehouse_shipping_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('advance_payment_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('order_status', sa.String(length=32), nullable=False),
        sa.Column('created_by', sa.String(length=64), sa.ForeignKey('admin_accounts.id'), nullable=True),
        sa.Column('updated_by', sa.String(length=64), sa.ForeignKey('admin_accounts.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_purchase_orders_po_number', 'purchase_orders', ['po_number'])
    op.create_index('ix_purchase_orders_order_status', 'purchase_orders', ['order_status'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_id', sa.String(length=64), nullable=True),
        sa.Column('actor_level', sa.String(length=32), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=64)),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_audit_logs_actor_id', 'audit_logs', ['actor_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    for tbl in ['audit_logs', 'purchase_orders', 'permission_settings', 'admin_accounts']:
        op.drop_table(tbl)
