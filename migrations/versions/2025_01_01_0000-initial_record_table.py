"""Initial record table

Revision ID: 001_initial
Revises: 
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the record table:
    - code: primary key (record_pkey)
    - url: unique (record_url_key), the upsert conflict target
    - visit_count: starts at 0
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # The application may already have bootstrapped the table
    if 'record' in existing_tables:
        return

    op.create_table(
        'record',
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('visit_count', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('code', name='record_pkey'),
        sa.UniqueConstraint('url', name='record_url_key'),
    )


def downgrade() -> None:
    op.drop_table('record')
