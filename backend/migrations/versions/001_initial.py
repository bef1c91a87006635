"""Initial migration - create the students table

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates the single table backing the student registry. Rows are keyed by
a 36-character UUID string and listed in primary key order.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'students',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('date_birth', sa.Text(), nullable=False),
        sa.Column('date_admission', sa.Text(), nullable=False),
        sa.Column('course', sa.Text(), nullable=False),
        sa.Column('course_type', sa.Text(), nullable=False),
        sa.Column('location', sa.Text(), nullable=False),
        sa.Column('parent', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('students')
