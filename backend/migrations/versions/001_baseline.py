"""Baseline schema

Revision ID: baseline_001
Revises:
Create Date: 2026-10-19

Creates:
- units, orders, order_logs
- stock_commits, invoices, barcodes
- material_requests, material_approvals
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'baseline_001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'units',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('is_main', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_units_id', 'units', ['id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_no', sa.String(length=50), nullable=False),
        sa.Column('unit_id', sa.Integer(), sa.ForeignKey('units.id'), nullable=False),
        sa.Column('style_number', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('box_count', sa.Integer(), nullable=True),
        sa.Column('actual_box_count', sa.Integer(), nullable=True),
        sa.Column('last_barcode_serial', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('size_breakdown', sa.JSON(), nullable=True),
        sa.Column('completion_breakdown', sa.JSON(), nullable=True),
        sa.Column('size_format', sa.String(length=20), nullable=False, server_default='standard'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('qc_notes', sa.Text(), nullable=True),
        sa.Column('qc_attachment_url', sa.String(length=500), nullable=True),
        sa.Column('attachment_url', sa.String(length=500), nullable=True),
        sa.Column('attachment_name', sa.String(length=255), nullable=True),
        sa.Column('target_delivery_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='ASSIGNED'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_order_no', 'orders', ['order_no'], unique=True)
    op.create_index('ix_orders_unit_id', 'orders', ['unit_id'])
    op.create_index('ix_orders_style_number', 'orders', ['style_number'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_target_delivery_date', 'orders', ['target_delivery_date'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table(
        'order_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('log_type', sa.String(length=30), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_by_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_logs_id', 'order_logs', ['id'])
    op.create_index('ix_order_logs_order_id', 'order_logs', ['order_id'])
    op.create_index('ix_order_logs_log_type', 'order_logs', ['log_type'])
    op.create_index('ix_order_logs_created_at', 'order_logs', ['created_at'])

    op.create_table(
        'stock_commits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('total_items', sa.Integer(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_stock_commits_id', 'stock_commits', ['id'])
    op.create_index('ix_stock_commits_created_at', 'stock_commits', ['created_at'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_no', sa.String(length=50), nullable=False),
        sa.Column('customer_name', sa.String(length=200), nullable=False),
        sa.Column('total_amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_invoices_id', 'invoices', ['id'])
    op.create_index('ix_invoices_invoice_no', 'invoices', ['invoice_no'], unique=True)
    op.create_index('ix_invoices_created_at', 'invoices', ['created_at'])

    op.create_table(
        'barcodes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('barcode_serial', sa.String(length=200), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('style_number', sa.String(length=100), nullable=False),
        sa.Column('size', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='GENERATED'),
        sa.Column('commit_id', sa.Integer(), sa.ForeignKey('stock_commits.id'), nullable=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_barcodes_id', 'barcodes', ['id'])
    op.create_index('ix_barcodes_barcode_serial', 'barcodes', ['barcode_serial'], unique=True)
    op.create_index('ix_barcodes_order_id', 'barcodes', ['order_id'])
    op.create_index('ix_barcodes_status', 'barcodes', ['status'])
    op.create_index('ix_barcodes_commit_id', 'barcodes', ['commit_id'])
    op.create_index('ix_barcodes_invoice_id', 'barcodes', ['invoice_id'])

    op.create_table(
        'material_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('material_content', sa.Text(), nullable=False),
        sa.Column('quantity_requested', sa.Numeric(18, 4), nullable=False),
        sa.Column('quantity_approved', sa.Numeric(18, 4), nullable=False, server_default='0'),
        sa.Column('unit', sa.String(length=20), nullable=False, server_default='Nos'),
        sa.Column('attachment_url', sa.String(length=500), nullable=True),
        sa.Column('requested_by_name', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_material_requests_id', 'material_requests', ['id'])
    op.create_index('ix_material_requests_order_id', 'material_requests', ['order_id'])
    op.create_index('ix_material_requests_status', 'material_requests', ['status'])
    op.create_index('ix_material_requests_created_at', 'material_requests', ['created_at'])

    op.create_table(
        'material_approvals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column(
            'request_id', sa.Integer(),
            sa.ForeignKey('material_requests.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('qty_approved', sa.Numeric(18, 4), nullable=False),
        sa.Column('approved_by_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_material_approvals_id', 'material_approvals', ['id'])
    op.create_index('ix_material_approvals_request_id', 'material_approvals', ['request_id'])


def downgrade() -> None:
    op.drop_table('material_approvals')
    op.drop_table('material_requests')
    op.drop_table('barcodes')
    op.drop_table('invoices')
    op.drop_table('stock_commits')
    op.drop_table('order_logs')
    op.drop_table('orders')
    op.drop_table('units')
