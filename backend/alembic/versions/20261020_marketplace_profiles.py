"""marketplace_profiles

Revision ID: 002_marketplace_profiles
Revises: 001_initial
Create Date: 2026-10-20

Adds vendor profile columns and delivery zones, and per-user alert feedback
with the reported actual supply timing.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002_marketplace_profiles'
down_revision: Union[str, None] = '001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('vendors', sa.Column('description', sa.Text(), nullable=True))
    op.add_column('vendors', sa.Column('address', sa.String(500), nullable=True))
    op.add_column('vendors', sa.Column('longitude', sa.Float(), nullable=True))
    op.add_column('vendors', sa.Column('latitude', sa.Float(), nullable=True))

    op.create_table(
        'vendor_zones',
        sa.Column(
            'vendor_id',
            sa.Uuid(),
            sa.ForeignKey('vendors.vendor_id', ondelete='CASCADE'),
            primary_key=True,
        ),
        sa.Column(
            'zone_id',
            sa.Uuid(),
            sa.ForeignKey('zones.zone_id', ondelete='CASCADE'),
            primary_key=True,
        ),
    )

    op.create_table(
        'alert_feedback',
        sa.Column('feedback_id', sa.Uuid(), primary_key=True),
        sa.Column('alert_id', sa.Uuid(), sa.ForeignKey('alerts.alert_id'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('accurate', sa.Boolean(), nullable=False),
        sa.Column('actual_start_time', sa.DateTime(), nullable=True),
        sa.Column('actual_duration', sa.Integer(), nullable=True),
        sa.Column('comment', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('alert_id', 'user_id', name='uq_alert_feedback_user'),
        sa.CheckConstraint(
            'actual_duration IS NULL OR actual_duration > 0',
            name='chk_alert_feedback_duration_positive',
        ),
    )


def downgrade() -> None:
    op.drop_table('alert_feedback')
    op.drop_table('vendor_zones')
    for column in ('latitude', 'longitude', 'address', 'description'):
        op.drop_column('vendors', column)
