"""Create loans, email settings and reminder log tables

Revision ID: 20261017_payment_reminders
Revises: 
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_payment_reminders'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('loans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('borrower_name', sa.String(length=120), nullable=False),
        sa.Column('borrower_email', sa.String(length=120), nullable=True),
        sa.Column('borrower_phone', sa.String(length=40), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('interest_rate', sa.Numeric(precision=7, scale=3), nullable=False),
        sa.Column('interest_type', sa.String(length=10), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('paid_amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('late_fee', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('reminders_enabled', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('reminder_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_reminder_sent_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('id')
    )
    with op.batch_alter_table('loans', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_loans_due_date'), ['due_date'], unique=False)

    op.create_table('email_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('smtp_host', sa.String(length=255), nullable=True),
        sa.Column('smtp_port', sa.Integer(), server_default='465', nullable=False),
        sa.Column('smtp_username', sa.String(length=255), nullable=True),
        sa.Column('smtp_password', sa.String(length=255), nullable=True),
        sa.Column('from_email', sa.String(length=120), nullable=True),
        sa.Column('from_name', sa.String(length=120), nullable=False),
        sa.Column('reminder_days_before', sa.Integer(), server_default='3', nullable=False),
        sa.Column('max_overdue_reminders', sa.Integer(), server_default='7', nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('email_reminder_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('loan_id', sa.Uuid(), nullable=False),
        sa.Column('email_type', sa.String(length=20), nullable=False),
        sa.Column('recipient_email', sa.String(length=120), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=10), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['loan_id'], ['loans.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('id')
    )
    with op.batch_alter_table('email_reminder_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_email_reminder_logs_created_at'), ['created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_email_reminder_logs_loan_id'), ['loan_id'], unique=False)


def downgrade():
    with op.batch_alter_table('email_reminder_logs', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_email_reminder_logs_loan_id'))
        batch_op.drop_index(batch_op.f('ix_email_reminder_logs_created_at'))
    op.drop_table('email_reminder_logs')

    op.drop_table('email_settings')

    with op.batch_alter_table('loans', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_loans_due_date'))
    op.drop_table('loans')
