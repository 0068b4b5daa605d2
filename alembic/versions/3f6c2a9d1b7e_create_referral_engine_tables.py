"""Create referral engine tables

Revision ID: 3f6c2a9d1b7e
Revises:
Create Date: 2025-11-02 10:14:27.318804

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f6c2a9d1b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum types, stored by member name like the ORM models
referralstatus_enum = sa.Enum('PENDING', 'ACTIVE', 'INACTIVE', name='referralstatus')
rewardtype_enum = sa.Enum('SMS_30', 'FREE_NORMAL_MONTH', 'FREE_PRO_MONTH', name='rewardtype')
rewardstatus_enum = sa.Enum('EARNED', 'APPLIED', 'EXPIRED', name='rewardstatus')
claimtokenstatus_enum = sa.Enum('PENDING', 'CLAIMED', 'EXPIRED', name='claimtokenstatus')


def upgrade() -> None:
    """Create codes, referrals, clicks, rewards, claim tokens and SMS credit grants."""
    op.create_table(
        'referral_codes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_user_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_referral_codes_id'), 'referral_codes', ['id'], unique=False)
    op.create_index(op.f('ix_referral_codes_owner_user_id'), 'referral_codes', ['owner_user_id'], unique=True)
    op.create_index(op.f('ix_referral_codes_code'), 'referral_codes', ['code'], unique=True)

    op.create_table(
        'referrals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('referrer_user_id', sa.Integer(), nullable=False),
        sa.Column('referred_user_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('status', referralstatus_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('activated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('referrer_user_id', 'referred_user_id', name='_referrer_referred_uc'),
    )
    op.create_index(op.f('ix_referrals_id'), 'referrals', ['id'], unique=False)
    op.create_index(op.f('ix_referrals_referrer_user_id'), 'referrals', ['referrer_user_id'], unique=False)
    op.create_index(op.f('ix_referrals_referred_user_id'), 'referrals', ['referred_user_id'], unique=False)
    op.create_index(op.f('ix_referrals_status'), 'referrals', ['status'], unique=False)

    op.create_table(
        'referral_clicks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('referral_id', sa.Integer(), nullable=False),
        sa.Column('customer_user_id', sa.Integer(), nullable=True),
        sa.Column('visitor_id', sa.String(length=128), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=False),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('clicked_at', sa.DateTime(), nullable=False),
        sa.Column('is_valid', sa.Boolean(), nullable=False),
        sa.Column('month_year', sa.String(length=7), nullable=False),
        sa.ForeignKeyConstraint(['referral_id'], ['referrals.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_referral_clicks_id'), 'referral_clicks', ['id'], unique=False)
    op.create_index('ix_referral_clicks_monthly', 'referral_clicks', ['referral_id', 'month_year', 'is_valid'], unique=False)
    op.create_index('ix_referral_clicks_customer', 'referral_clicks', ['referral_id', 'customer_user_id', 'clicked_at'], unique=False)
    op.create_index('ix_referral_clicks_visitor', 'referral_clicks', ['referral_id', 'visitor_id', 'clicked_at'], unique=False)

    op.create_table(
        'referral_rewards',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('referrer_user_id', sa.Integer(), nullable=False),
        sa.Column('referral_id', sa.Integer(), nullable=True),
        sa.Column('reward_type', rewardtype_enum, nullable=False),
        sa.Column('reward_value', sa.Integer(), nullable=False),
        sa.Column('clicks_required', sa.Integer(), nullable=False),
        sa.Column('clicks_achieved', sa.Integer(), nullable=False),
        sa.Column('earned_at', sa.DateTime(), nullable=False),
        sa.Column('applied_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('status', rewardstatus_enum, nullable=False),
        sa.Column('is_aggregate', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['referral_id'], ['referrals.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_referral_rewards_id'), 'referral_rewards', ['id'], unique=False)
    op.create_index(op.f('ix_referral_rewards_referrer_user_id'), 'referral_rewards', ['referrer_user_id'], unique=False)
    op.create_index(op.f('ix_referral_rewards_status'), 'referral_rewards', ['status'], unique=False)
    # NULL referral_id never collides in a plain unique constraint
    op.create_index(
        'uq_referral_rewards_individual', 'referral_rewards', ['referral_id', 'reward_type'], unique=True,
        postgresql_where=sa.text('NOT is_aggregate'), sqlite_where=sa.text('NOT is_aggregate'),
    )
    op.create_index(
        'uq_referral_rewards_aggregate', 'referral_rewards', ['referrer_user_id', 'reward_type'], unique=True,
        postgresql_where=sa.text('is_aggregate'), sqlite_where=sa.text('is_aggregate'),
    )

    op.create_table(
        'reward_claim_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reward_id', sa.Integer(), nullable=False),
        sa.Column('referrer_user_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('status', claimtokenstatus_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('claimed_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['reward_id'], ['referral_rewards.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reward_claim_tokens_id'), 'reward_claim_tokens', ['id'], unique=False)
    op.create_index(op.f('ix_reward_claim_tokens_reward_id'), 'reward_claim_tokens', ['reward_id'], unique=False)
    op.create_index(op.f('ix_reward_claim_tokens_referrer_user_id'), 'reward_claim_tokens', ['referrer_user_id'], unique=False)
    op.create_index(op.f('ix_reward_claim_tokens_token'), 'reward_claim_tokens', ['token'], unique=True)
    op.create_index(op.f('ix_reward_claim_tokens_status'), 'reward_claim_tokens', ['status'], unique=False)

    op.create_table(
        'sms_credit_grants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('reward_id', sa.Integer(), nullable=False),
        sa.Column('claim_token_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=32), nullable=False),
        sa.Column('granted_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['reward_id'], ['referral_rewards.id']),
        sa.ForeignKeyConstraint(['claim_token_id'], ['reward_claim_tokens.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reward_id'),
    )
    op.create_index(op.f('ix_sms_credit_grants_id'), 'sms_credit_grants', ['id'], unique=False)
    op.create_index(op.f('ix_sms_credit_grants_user_id'), 'sms_credit_grants', ['user_id'], unique=False)


def downgrade() -> None:
    """Drop all referral engine tables and enum types."""
    op.drop_table('sms_credit_grants')
    op.drop_table('reward_claim_tokens')
    op.drop_index('uq_referral_rewards_aggregate', table_name='referral_rewards')
    op.drop_index('uq_referral_rewards_individual', table_name='referral_rewards')
    op.drop_table('referral_rewards')
    op.drop_table('referral_clicks')
    op.drop_table('referrals')
    op.drop_table('referral_codes')

    bind = op.get_bind()
    claimtokenstatus_enum.drop(bind, checkfirst=True)
    rewardstatus_enum.drop(bind, checkfirst=True)
    rewardtype_enum.drop(bind, checkfirst=True)
    referralstatus_enum.drop(bind, checkfirst=True)
