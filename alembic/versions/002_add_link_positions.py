"""Add position column to association tables

Revision ID: 002
Revises: 001_initial
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002_add_link_positions'
down_revision: Union[str, None] = '001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LINK_TABLES = (
    'incident_victims',
    'incident_witnesses',
    'sentence_people',
    'proceeding_other_documents',
    'proceeding_plaintiffs',
    'proceeding_defendants',
    'proceeding_plaintiff_advocates',
    'proceeding_defendant_advocates',
)


def upgrade() -> None:
    # Existing links keep their stored order by falling back to the key column
    for table in LINK_TABLES:
        op.add_column(
            table,
            sa.Column('position', sa.Integer(), nullable=False, server_default='0')
        )


def downgrade() -> None:
    for table in LINK_TABLES:
        op.drop_column(table, 'position')
