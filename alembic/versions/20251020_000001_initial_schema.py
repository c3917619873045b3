"""initial schema

Revision ID: 20251020_000001
Revises:
Create Date: 2025-10-20 00:00:01.000000

"""
from typing import Sequence, Union

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '20251020_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # analyzed_strings table, keyed by the sha256 of the value
    op.create_table(
        'analyzed_strings',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('length', sa.Integer(), nullable=False),
        sa.Column('is_palindrome', sa.Boolean(), nullable=False),
        sa.Column('word_count', sa.Integer(), nullable=False),
        sa.Column('unique_characters', sa.Integer(), nullable=False),
        sa.Column('character_frequency_map', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(op.f('ix_analyzed_strings_length'), 'analyzed_strings', ['length'], unique=False)
    op.create_index(op.f('ix_analyzed_strings_is_palindrome'), 'analyzed_strings', ['is_palindrome'], unique=False)
    op.create_index(op.f('ix_analyzed_strings_word_count'), 'analyzed_strings', ['word_count'], unique=False)
    op.create_index(op.f('ix_analyzed_strings_created_at'), 'analyzed_strings', ['created_at'], unique=False)

    # string_characters table: one row per distinct character of a string
    op.create_table(
        'string_characters',
        sa.Column(
            'string_id',
            sa.String(64),
            sa.ForeignKey('analyzed_strings.id', ondelete='CASCADE'),
            primary_key=True,
        ),
        sa.Column('character', sa.String(1), primary_key=True),
    )
    op.create_index(op.f('ix_string_characters_character'), 'string_characters', ['character'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_string_characters_character'), table_name='string_characters')
    op.drop_table('string_characters')

    op.drop_index(op.f('ix_analyzed_strings_created_at'), table_name='analyzed_strings')
    op.drop_index(op.f('ix_analyzed_strings_word_count'), table_name='analyzed_strings')
    op.drop_index(op.f('ix_analyzed_strings_is_palindrome'), table_name='analyzed_strings')
    op.drop_index(op.f('ix_analyzed_strings_length'), table_name='analyzed_strings')
    op.drop_table('analyzed_strings')
