"""initial schema: profiles, bookings, block periods, notifications, audit logs

Revision ID: 5e1f0c2a9b7d
Revises:
Create Date: 2025-01-06 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5e1f0c2a9b7d'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('service_number', sa.String(length=6), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('display_name', sa.String(length=120), nullable=False),
        sa.Column('rank', sa.String(length=40), nullable=False),
        sa.Column('unit', sa.String(length=40), nullable=False),
        sa.Column('service_document_number', sa.String(length=120), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('user_profiles', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_profiles_service_number'), ['service_number'], unique=False)
        batch_op.create_index(batch_op.f('ix_user_profiles_role'), ['role'], unique=False)
        batch_op.create_index(
            'uq_user_profiles_single_lead',
            ['role'],
            unique=True,
            sqlite_where=sa.text("role = 'LEAD_ADMIN'"),
            postgresql_where=sa.text("role = 'LEAD_ADMIN'"),
        )

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(length=16), nullable=False),
        sa.Column('requester_id', sa.String(length=64), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.String(length=120), nullable=False),
        sa.Column('via_service_channel', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['requester_id'], ['user_profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_bookings_requester_id'), ['requester_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_scheduled_at'), ['scheduled_at'], unique=False)
        batch_op.create_index(
            'uq_bookings_active_instant',
            ['scheduled_at'],
            unique=True,
            sqlite_where=sa.text("status = 'SCHEDULED' AND substr(id, 1, 4) <> 'ENC-'"),
            postgresql_where=sa.text("status = 'SCHEDULED' AND substr(id, 1, 4) <> 'ENC-'"),
        )

    op.create_table(
        'block_periods',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('start', sa.DateTime(), nullable=False),
        sa.Column('end', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=False),
        sa.Column('created_by_id', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('start < "end"', name='ck_block_periods_range'),
        sa.ForeignKeyConstraint(['created_by_id'], ['user_profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('block_periods', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_block_periods_start'), ['start'], unique=False)
        batch_op.create_index(batch_op.f('ix_block_periods_end'), ['end'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('recipient_id', sa.String(length=64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('notifications', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_notifications_recipient_id'), ['recipient_id'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(length=64), nullable=True),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity', sa.String(length=80), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_audit_logs_actor_id'), ['actor_id'], unique=False)


def downgrade():
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_audit_logs_actor_id'))
    op.drop_table('audit_logs')

    with op.batch_alter_table('notifications', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_notifications_recipient_id'))
    op.drop_table('notifications')

    with op.batch_alter_table('block_periods', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_block_periods_end'))
        batch_op.drop_index(batch_op.f('ix_block_periods_start'))
    op.drop_table('block_periods')

    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.drop_index('uq_bookings_active_instant')
        batch_op.drop_index(batch_op.f('ix_bookings_scheduled_at'))
        batch_op.drop_index(batch_op.f('ix_bookings_requester_id'))
    op.drop_table('bookings')

    with op.batch_alter_table('user_profiles', schema=None) as batch_op:
        batch_op.drop_index('uq_user_profiles_single_lead')
        batch_op.drop_index(batch_op.f('ix_user_profiles_role'))
        batch_op.drop_index(batch_op.f('ix_user_profiles_service_number'))
    op.drop_table('user_profiles')
