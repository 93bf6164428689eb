"""initial medication reminder schema

Revision ID: 3b9e1c7d2a40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b9e1c7d2a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('subscriptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subscription_type', sa.String(20), nullable=False, server_default='Basic'),
        sa.Column('max_medicines', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('blood_pressure_manager', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('diabetic_manager', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('email_hash', sa.String(64), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('subscription_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['subscription_id'], ['subscriptions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email_hash', 'users', ['email_hash'], unique=True)

    op.create_table('medications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('dose_times', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('course_duration_days', sa.Integer(), nullable=True),
        sa.Column('course_start_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_medications_user_id', 'medications', ['user_id'])

    op.create_table('blood_pressure_readings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('systolic', sa.Integer(), nullable=False),
        sa.Column('diastolic', sa.Integer(), nullable=False),
        sa.Column('pulse', sa.Integer(), nullable=False),
        sa.Column('reading_date', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('arm', sa.String(10), nullable=True),
        sa.Column('position', sa.String(10), nullable=True),
        sa.Column('meal_condition', sa.String(10), nullable=True),
        sa.Column('medicine_condition', sa.String(10), nullable=True),
        sa.Column('activity_condition', sa.String(10), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_blood_pressure_readings_user_id', 'blood_pressure_readings', ['user_id'])
    op.create_index('ix_blood_pressure_readings_reading_date', 'blood_pressure_readings', ['reading_date'])

    op.create_table('diabetic_readings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('glucose_level', sa.Integer(), nullable=False),
        sa.Column('reading_type', sa.String(10), nullable=False, server_default='fasting'),
        sa.Column('reading_date', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_diabetic_readings_user_id', 'diabetic_readings', ['user_id'])
    op.create_index('ix_diabetic_readings_reading_date', 'diabetic_readings', ['reading_date'])

    op.create_table('emergency_contacts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    op.create_table('password_resets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_password_resets_user_id', 'password_resets', ['user_id'])

    op.create_table('rate_limit_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('endpoint', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_rate_limit_entries_key', 'rate_limit_entries', ['key'])
    op.create_index('ix_rate_limit_entries_endpoint', 'rate_limit_entries', ['endpoint'])
    op.create_index('ix_rate_limit_key_endpoint_ts', 'rate_limit_entries', ['key', 'endpoint', 'timestamp'])


def downgrade():
    op.drop_index('ix_rate_limit_key_endpoint_ts', 'rate_limit_entries')
    op.drop_index('ix_rate_limit_entries_endpoint', 'rate_limit_entries')
    op.drop_index('ix_rate_limit_entries_key', 'rate_limit_entries')
    op.drop_table('rate_limit_entries')
    op.drop_index('ix_password_resets_user_id', 'password_resets')
    op.drop_table('password_resets')
    op.drop_table('emergency_contacts')
    op.drop_index('ix_diabetic_readings_reading_date', 'diabetic_readings')
    op.drop_index('ix_diabetic_readings_user_id', 'diabetic_readings')
    op.drop_table('diabetic_readings')
    op.drop_index('ix_blood_pressure_readings_reading_date', 'blood_pressure_readings')
    op.drop_index('ix_blood_pressure_readings_user_id', 'blood_pressure_readings')
    op.drop_table('blood_pressure_readings')
    op.drop_index('ix_medications_user_id', 'medications')
    op.drop_table('medications')
    op.drop_index('ix_users_email_hash', 'users')
    op.drop_table('users')
    op.drop_table('subscriptions')
