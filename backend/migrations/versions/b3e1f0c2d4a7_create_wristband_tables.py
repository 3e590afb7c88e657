"""create wristband tables

Revision ID: b3e1f0c2d4a7
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b3e1f0c2d4a7'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('email_hash', sa.String(64), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email_hash', 'users', ['email_hash'], unique=True)

    op.create_table('user_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=True),
        sa.Column('date_of_birth', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('existing_diseases', sa.Text(), nullable=True),
        sa.Column('medications', sa.Text(), nullable=True),
        sa.Column('allergies', sa.Text(), nullable=True),
        sa.Column('family_history', sa.Text(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(50), nullable=True),
        sa.Column('blood_group', sa.String(10), nullable=True),
        sa.Column('height', sa.Float(), nullable=True),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('smoking', sa.String(20), nullable=True),
        sa.Column('alcohol', sa.String(20), nullable=True),
        sa.Column('diet', sa.String(200), nullable=True),
        sa.Column('exercise', sa.String(200), nullable=True),
        sa.Column('sleep_hours', sa.Float(), nullable=True),
        sa.Column('occupation', sa.String(200), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('region', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('wristband_data',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('device_id', sa.String(255), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('hr', sa.Integer(), nullable=False),
        sa.Column('temp', sa.Float(), nullable=False),
        sa.Column('spo2', sa.Integer(), nullable=False),
        sa.Column('bp_sys', sa.Integer(), nullable=False),
        sa.Column('bp_dia', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_wristband_data_device_id', 'wristband_data', ['device_id'])
    op.create_index('ix_wristband_data_user_id', 'wristband_data', ['user_id'])
    op.create_index('ix_wristband_data_created_at', 'wristband_data', ['created_at'])
    op.create_index('ix_wristband_data_user_created', 'wristband_data', ['user_id', 'created_at'])

    op.create_table('volunteers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('email_hash', sa.String(64), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_volunteers_email_hash', 'volunteers', ['email_hash'], unique=True)

    op.create_table('volunteer_user_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('volunteer_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['volunteer_id'], ['volunteers.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('volunteer_id', 'user_id', name='uq_volunteer_user')
    )
    op.create_index('ix_volunteer_user_assignments_volunteer_id', 'volunteer_user_assignments', ['volunteer_id'])
    op.create_index('ix_volunteer_user_assignments_user_id', 'volunteer_user_assignments', ['user_id'])

    op.create_table('revoked_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('jti', sa.String(64), nullable=False),
        sa.Column('subject', sa.String(80), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_revoked_tokens_jti', 'revoked_tokens', ['jti'], unique=True)

    op.create_table('rate_limit_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_key', sa.String(255), nullable=False),
        sa.Column('bucket', sa.String(64), nullable=False),
        sa.Column('attempted_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_rate_limit_client_bucket_ts', 'rate_limit_entries',
                    ['client_key', 'bucket', 'attempted_at'])


def downgrade():
    op.drop_table('rate_limit_entries')
    op.drop_table('revoked_tokens')
    op.drop_table('volunteer_user_assignments')
    op.drop_table('volunteers')
    op.drop_table('wristband_data')
    op.drop_table('user_profiles')
    op.drop_table('users')
