"""Create user_profiles and resumes

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2025-09-02 18:41:12.504113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('clerk_user_id', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('linkedin', sa.String(length=512), nullable=True),
        sa.Column('twitter_handle', sa.String(length=128), nullable=True),
        sa.Column('ig_handle', sa.String(length=128), nullable=True),
        sa.Column('website', sa.String(length=512), nullable=True),
        sa.Column('evm_wallet_address', sa.String(length=128), nullable=True),
        sa.Column('solana_wallet_address', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    # Both lookups the read-through cache issues are equality lookups on these
    op.create_index('ix_user_profiles_clerk_user_id', 'user_profiles', ['clerk_user_id'], unique=True)
    op.create_index('ix_user_profiles_username', 'user_profiles', ['username'], unique=True)

    op.create_table(
        'resumes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_profile_id', sa.Uuid(), nullable=False),
        sa.Column('tweets', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_profile_id'], ['user_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_profile_id'),
    )


def downgrade() -> None:
    op.drop_table('resumes')
    op.drop_index('ix_user_profiles_username', table_name='user_profiles')
    op.drop_index('ix_user_profiles_clerk_user_id', table_name='user_profiles')
    op.drop_table('user_profiles')
