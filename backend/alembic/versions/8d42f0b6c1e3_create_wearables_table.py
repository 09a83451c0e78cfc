"""create wearables profile table

Revision ID: 8d42f0b6c1e3
Revises: 3e1c5a7d9b20
Create Date: 2026-09-28 00:20:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '8d42f0b6c1e3'
down_revision: Union[str, Sequence[str], None] = '3e1c5a7d9b20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


METRIC_COLUMNS = [
    'heart_rate',
    'sleep_hours',
    'blood_pressure_systolic',
    'blood_pressure_diastolic',
    'glucose',
    'body_temperature',
    'calories',
    'stress_level',
    'workout_duration',
    'basal_body_temperature',
    'body_mass_index',
]


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    if 'wearables' in inspector.get_table_names():
        return
    op.create_table(
        'wearables',
        sa.Column('user_id', sa.String(), primary_key=True, nullable=False),
        sa.Column('last_event', sa.String(), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=True),
        sa.Column('steps', sa.Integer(), nullable=True),
        *[sa.Column(name, sa.Float(), nullable=True) for name in METRIC_COLUMNS],
        sa.Column('unparsed', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('vital_user_id', sa.String(), nullable=True),
        sa.Column('link_url', sa.String(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('access_token', sa.String(), nullable=True),
        sa.Column('connected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_wearables_vital_user_id', 'wearables', ['vital_user_id'])


def downgrade() -> None:
    op.drop_index('ix_wearables_vital_user_id', table_name='wearables')
    op.drop_table('wearables')
