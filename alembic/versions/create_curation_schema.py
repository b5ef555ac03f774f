"""Create curation schema: profiles, feed items, follows, shares and votes

Revision ID: create_curation_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = 'create_curation_schema'
down_revision = None
depends_on = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

activity_type_enum = sa.Enum(
    'recommended', 'saved', 'liked', 'shared', 'browsed', name='feed_activity_type'
)
follow_request_status_enum = sa.Enum('pending', 'accepted', 'declined', name='follow_request_status')
item_vote_type_enum = sa.Enum('like', 'dislike', name='item_vote_type')


def upgrade():
    """Crea las seis tablas del motor de curación."""

    op.create_table(
        'user_profiles',
        sa.Column('user_id', sa.String(length=255), primary_key=True),
        sa.Column('handle', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('last_active', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_user_profiles_last_active', 'user_profiles', ['last_active'])
    op.create_index('ix_user_profiles_handle', 'user_profiles', ['handle'])

    op.create_table(
        'user_feed_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=255),
                  sa.ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(length=255), nullable=False),
        sa.Column('product_snapshot', JSON_TYPE, nullable=False),
        sa.Column('activity_type', activity_type_enum, nullable=False),
        sa.Column('source', sa.String(length=100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'product_id', name='unique_feed_item_user_product'),
    )
    op.create_index('ix_user_feed_items_id', 'user_feed_items', ['id'])
    op.create_index('ix_user_feed_items_user_id', 'user_feed_items', ['user_id'])
    op.create_index('ix_user_feed_items_product_id', 'user_feed_items', ['product_id'])
    op.create_index(
        'ix_feed_items_user_active_created',
        'user_feed_items',
        ['user_id', 'is_active', 'created_at'],
    )

    op.create_table(
        'followers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('follower_id', sa.String(length=255),
                  sa.ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('following_id', sa.String(length=255),
                  sa.ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('followed_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('follower_id', 'following_id', name='unique_follower_following'),
    )
    op.create_index('ix_followers_id', 'followers', ['id'])
    op.create_index('ix_followers_follower_id', 'followers', ['follower_id'])
    op.create_index('ix_followers_following_id', 'followers', ['following_id'])
    op.create_index('ix_followers_following_followed_at', 'followers', ['following_id', 'followed_at'])

    op.create_table(
        'follow_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('requester_id', sa.String(length=255),
                  sa.ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('recipient_id', sa.String(length=255),
                  sa.ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', follow_request_status_enum, nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('requester_id', 'recipient_id', name='unique_follow_request_pair'),
    )
    op.create_index('ix_follow_requests_id', 'follow_requests', ['id'])
    op.create_index('ix_follow_requests_requester_id', 'follow_requests', ['requester_id'])
    op.create_index('ix_follow_requests_recipient_id', 'follow_requests', ['recipient_id'])
    op.create_index('ix_follow_requests_recipient_status', 'follow_requests', ['recipient_id', 'status'])

    op.create_table(
        'shared_items',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=255),
                  sa.ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(length=255), nullable=False),
        sa.Column('product_snapshot', JSON_TYPE, nullable=False),
        sa.Column('share_message', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_shared_items_user_id', 'shared_items', ['user_id'])
    op.create_index('ix_shared_items_product_id', 'shared_items', ['product_id'])
    op.create_index('ix_shared_items_is_active', 'shared_items', ['is_active'])
    op.create_index('ix_shared_items_user_created', 'shared_items', ['user_id', 'created_at'])
    # Un solo share activo por (user_id, product_id)
    op.create_index(
        'uq_shared_items_active_user_product',
        'shared_items',
        ['user_id', 'product_id'],
        unique=True,
        postgresql_where=sa.text('is_active'),
        sqlite_where=sa.text('is_active'),
    )

    op.create_table(
        'item_votes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('shared_item_id', sa.String(length=36),
                  sa.ForeignKey('shared_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('voter_id', sa.String(length=255),
                  sa.ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('vote_type', item_vote_type_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('shared_item_id', 'voter_id', name='unique_item_vote_voter'),
    )
    op.create_index('ix_item_votes_id', 'item_votes', ['id'])
    op.create_index('ix_item_votes_shared_item_id', 'item_votes', ['shared_item_id'])
    op.create_index('ix_item_votes_voter_id', 'item_votes', ['voter_id'])


def downgrade():
    """Elimina el esquema completo."""
    op.drop_table('item_votes')
    op.drop_index('uq_shared_items_active_user_product', table_name='shared_items')
    op.drop_table('shared_items')
    op.drop_table('follow_requests')
    op.drop_table('followers')
    op.drop_table('user_feed_items')
    op.drop_table('user_profiles')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        item_vote_type_enum.drop(bind, checkfirst=True)
        follow_request_status_enum.drop(bind, checkfirst=True)
        activity_type_enum.drop(bind, checkfirst=True)
