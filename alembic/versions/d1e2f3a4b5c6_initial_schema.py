"""initial schema

Revision ID: d1e2f3a4b5c6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'd1e2f3a4b5c6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ITEM_CATEGORY = ('Furniture', 'Equipment', 'Tools', 'Electronics', 'Software', 'Other')
ITEM_USAGE = ('None', 'Staff', 'Members', 'Others')
ITEM_STATUS = ('Available', 'Partially Available', 'Loaned Out', 'Damaged', 'Maintenance')
BORROWER_TYPE = ('Staff', 'Member', 'Student', 'Other Organization', 'Other')
LOAN_STATUS = ('Ongoing', 'Returned')
QUANTITY_ACTION = ('register', 'loan', 'return', 'damage', 'repair', 'remove', 'retire')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('model', sa.String(255), nullable=True),
        sa.Column('category', sa.Enum(*ITEM_CATEGORY, name='itemcategory'), nullable=False),
        sa.Column('usage', sa.Enum(*ITEM_USAGE, name='itemusage'), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('quantity_available', sa.Integer(), nullable=False),
        sa.Column('quantity_loaned', sa.Integer(), nullable=False),
        sa.Column('quantity_damaged', sa.Integer(), nullable=False),
        sa.Column('quantity_retired', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum(*ITEM_STATUS, name='itemstatus'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_items_quantity_nonneg'),
        sa.CheckConstraint('quantity_available >= 0', name='ck_items_available_nonneg'),
        sa.CheckConstraint('quantity_loaned >= 0', name='ck_items_loaned_nonneg'),
        sa.CheckConstraint('quantity_damaged >= 0', name='ck_items_damaged_nonneg'),
        sa.CheckConstraint(
            'quantity_available + quantity_loaned + quantity_damaged = quantity',
            name='ck_items_quantity_balance',
        ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_items_id', 'items', ['id'])
    op.create_index('ix_items_code', 'items', ['code'], unique=True)

    op.create_table(
        'loan_groups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(32), nullable=True),
        sa.Column('borrower_name', sa.String(255), nullable=False),
        sa.Column('borrower_type', sa.Enum(*BORROWER_TYPE, name='borrowertype'), nullable=False),
        sa.Column('borrower_contact', sa.String(255), nullable=True),
        sa.Column('loan_date', sa.Date(), nullable=False),
        sa.Column('expected_return_date', sa.Date(), nullable=False),
        sa.Column('actual_return_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum(*LOAN_STATUS, name='loanstatus'), nullable=False),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_loan_groups_id', 'loan_groups', ['id'])
    op.create_index('ix_loan_groups_code', 'loan_groups', ['code'], unique=True)

    op.create_table(
        'loans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=True),
        sa.Column('item_code', sa.String(64), nullable=False),
        sa.Column('item_name', sa.String(255), nullable=False),
        sa.Column('loan_group_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('borrower_name', sa.String(255), nullable=False),
        sa.Column('borrower_type', sa.Enum(*BORROWER_TYPE, name='borrowertype'), nullable=False),
        sa.Column('borrower_contact', sa.String(255), nullable=True),
        sa.Column('loan_date', sa.Date(), nullable=False),
        sa.Column('expected_return_date', sa.Date(), nullable=False),
        sa.Column('actual_return_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum(*LOAN_STATUS, name='loanstatus'), nullable=False),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_loans_quantity_positive'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['loan_group_id'], ['loan_groups.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_loans_id', 'loans', ['id'])
    op.create_index('ix_loans_item_id', 'loans', ['item_id'])
    op.create_index('ix_loans_loan_group_id', 'loans', ['loan_group_id'])

    op.create_table(
        'lifecycle_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=True),
        sa.Column('item_code', sa.String(64), nullable=False),
        sa.Column('statuses', sa.JSON(), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(2000), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('source', sa.Enum('available', 'damaged', name='retirementsource'), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_lifecycle_events_id', 'lifecycle_events', ['id'])
    op.create_index('ix_lifecycle_events_item_id', 'lifecycle_events', ['item_id'])

    op.create_table(
        'quantity_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=True),
        sa.Column('item_code', sa.String(64), nullable=False),
        sa.Column('action', sa.Enum(*QUANTITY_ACTION, name='quantityaction'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(2000), nullable=True),
        sa.Column('quantity_total', sa.Integer(), nullable=False),
        sa.Column('quantity_available', sa.Integer(), nullable=False),
        sa.Column('quantity_loaned', sa.Integer(), nullable=False),
        sa.Column('quantity_damaged', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_quantity_events_id', 'quantity_events', ['id'])
    op.create_index('ix_quantity_events_item_id', 'quantity_events', ['item_id'])

    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(64), nullable=False),
        sa.Column('type', sa.Enum('Acquisition', 'Loan', name='documenttype'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('related_ref', sa.String(64), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('signed_by', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_documents_id', 'documents', ['id'])
    op.create_index('ix_documents_code', 'documents', ['code'], unique=True)
    op.create_index('ix_documents_related_ref', 'documents', ['related_ref'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(32), nullable=False),
        sa.Column('entity_type', sa.String(32), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=False),
        sa.Column('details', sa.String(2000), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activity_logs_id', 'activity_logs', ['id'])
    op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
    op.create_index('ix_activity_logs_timestamp', 'activity_logs', ['timestamp'])


def downgrade() -> None:
    op.drop_table('activity_logs')
    op.drop_table('documents')
    op.drop_table('quantity_events')
    op.drop_table('lifecycle_events')
    op.drop_table('loans')
    op.drop_table('loan_groups')
    op.drop_table('items')
    op.drop_table('users')
