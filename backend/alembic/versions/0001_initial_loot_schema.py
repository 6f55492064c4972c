"""initial loot schema: guilds, users, wishlist, loot sessions, claims, history, notifications

Revision ID: 0001a7c3e9b2
Revises:
Create Date: 2026-10-17 09:12:44.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001a7c3e9b2'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('guilds',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=100), nullable=False),
    sa.Column('loot_system', sa.Enum('COUNCIL', 'ROLL', 'FCFS', name='lootsystem'), nullable=False),
    sa.Column('participation_threshold', sa.Integer(), nullable=False),
    sa.Column('discord_webhook_url', sa.String(length=500), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_guilds_id'), 'guilds', ['id'], unique=False)

    op.create_table('users',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('username', sa.String(length=100), nullable=False),
    sa.Column('display_name', sa.String(length=100), nullable=True),
    sa.Column('role', sa.Enum('GUEST', 'MEMBER', 'OFFICER', 'ADMIN', name='userrole'), nullable=False),
    sa.Column('guild_id', sa.Integer(), nullable=True),
    sa.Column('participation_points', sa.Integer(), nullable=False),
    sa.Column('loot_received_count', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['guild_id'], ['guilds.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_guild_id'), 'users', ['guild_id'], unique=False)

    op.create_table('wishlist_entries',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('slot_name', sa.Enum('MAIN_HAND', 'OFF_HAND', 'HEAD', 'CHEST', 'GLOVES', 'LEGS', 'FEET', 'CLOAK',
                                   'NECKLACE', 'BRACELET', 'RING1', 'RING2', 'BELT', name='gearslot'), nullable=False),
    sa.Column('item_name', sa.String(length=200), nullable=False),
    sa.Column('item_priority', sa.Integer(), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('user_id', 'slot_name', 'item_priority', name='uq_wishlist_user_slot_priority')
    )
    op.create_index(op.f('ix_wishlist_entries_id'), 'wishlist_entries', ['id'], unique=False)
    op.create_index(op.f('ix_wishlist_entries_user_id'), 'wishlist_entries', ['user_id'], unique=False)
    op.create_index(op.f('ix_wishlist_entries_item_name'), 'wishlist_entries', ['item_name'], unique=False)

    op.create_table('loot_sessions',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('guild_id', sa.Integer(), nullable=False),
    sa.Column('item_name', sa.String(length=200), nullable=False),
    sa.Column('category', sa.Enum('GUILD_RAID', 'BROCANTE', name='lootcategory'), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('custom_name', sa.String(length=200), nullable=True),
    sa.Column('custom_traits', sa.JSON(), nullable=True),
    sa.Column('rarity', sa.Enum('UNCOMMON', 'RARE', 'EPIC', name='lootrarity'), nullable=True),
    sa.Column('image_url', sa.String(length=500), nullable=True),
    sa.Column('created_by_id', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('awarded_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('awarded_to_id', sa.Integer(), nullable=True),
    sa.ForeignKeyConstraint(['awarded_to_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['guild_id'], ['guilds.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sqlite_autoincrement=True
    )
    op.create_index(op.f('ix_loot_sessions_id'), 'loot_sessions', ['id'], unique=False)
    op.create_index(op.f('ix_loot_sessions_guild_id'), 'loot_sessions', ['guild_id'], unique=False)
    # Höchstens eine geöffnete Session pro Gilde und Item
    op.create_index('uq_loot_sessions_active_item', 'loot_sessions', ['guild_id', 'item_name'], unique=True,
                    sqlite_where=sa.text('is_active = 1'), postgresql_where=sa.text('is_active'))

    op.create_table('loot_claims',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('session_id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('guild_id', sa.Integer(), nullable=False),
    sa.Column('item_name', sa.String(length=200), nullable=False),
    sa.Column('kind', sa.Enum('REQUEST', 'ROLL', name='claimkind'), nullable=False),
    sa.Column('roll_value', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.CheckConstraint("(kind = 'REQUEST' AND roll_value IS NULL) OR (kind = 'ROLL' AND roll_value BETWEEN 1 AND 99)",
                       name='ck_loot_claims_roll_value'),
    sa.ForeignKeyConstraint(['guild_id'], ['guilds.id'], ),
    sa.ForeignKeyConstraint(['session_id'], ['loot_sessions.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('session_id', 'user_id', name='uq_loot_claims_session_user')
    )
    op.create_index(op.f('ix_loot_claims_id'), 'loot_claims', ['id'], unique=False)
    op.create_index(op.f('ix_loot_claims_session_id'), 'loot_claims', ['session_id'], unique=False)
    op.create_index(op.f('ix_loot_claims_user_id'), 'loot_claims', ['user_id'], unique=False)
    op.create_index(op.f('ix_loot_claims_item_name'), 'loot_claims', ['item_name'], unique=False)

    op.create_table('loot_history',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('guild_id', sa.Integer(), nullable=True),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('item_name', sa.String(length=200), nullable=False),
    sa.Column('loot_method', sa.Enum('ROLL', 'ROULETTE', 'COUNCIL', 'FCFS', 'BROCANTE', name='lootmethod'), nullable=False),
    sa.Column('session_id', sa.Integer(), nullable=True),
    sa.Column('awarded_by_id', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['awarded_by_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['guild_id'], ['guilds.id'], ),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_loot_history_id'), 'loot_history', ['id'], unique=False)
    op.create_index(op.f('ix_loot_history_guild_id'), 'loot_history', ['guild_id'], unique=False)
    op.create_index(op.f('ix_loot_history_user_id'), 'loot_history', ['user_id'], unique=False)

    op.create_table('notifications',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('guild_id', sa.Integer(), nullable=True),
    sa.Column('type', sa.String(length=50), nullable=False),
    sa.Column('message', sa.Text(), nullable=False),
    sa.Column('is_read', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['guild_id'], ['guilds.id'], ),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_notifications_user_id'), table_name='notifications')
    op.drop_index(op.f('ix_notifications_id'), table_name='notifications')
    op.drop_table('notifications')
    op.drop_index(op.f('ix_loot_history_user_id'), table_name='loot_history')
    op.drop_index(op.f('ix_loot_history_guild_id'), table_name='loot_history')
    op.drop_index(op.f('ix_loot_history_id'), table_name='loot_history')
    op.drop_table('loot_history')
    op.drop_index(op.f('ix_loot_claims_item_name'), table_name='loot_claims')
    op.drop_index(op.f('ix_loot_claims_user_id'), table_name='loot_claims')
    op.drop_index(op.f('ix_loot_claims_session_id'), table_name='loot_claims')
    op.drop_index(op.f('ix_loot_claims_id'), table_name='loot_claims')
    op.drop_table('loot_claims')
    op.drop_index('uq_loot_sessions_active_item', table_name='loot_sessions')
    op.drop_index(op.f('ix_loot_sessions_guild_id'), table_name='loot_sessions')
    op.drop_index(op.f('ix_loot_sessions_id'), table_name='loot_sessions')
    op.drop_table('loot_sessions')
    op.drop_index(op.f('ix_wishlist_entries_item_name'), table_name='wishlist_entries')
    op.drop_index(op.f('ix_wishlist_entries_user_id'), table_name='wishlist_entries')
    op.drop_index(op.f('ix_wishlist_entries_id'), table_name='wishlist_entries')
    op.drop_table('wishlist_entries')
    op.drop_index(op.f('ix_users_guild_id'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
    op.drop_index(op.f('ix_guilds_id'), table_name='guilds')
    op.drop_table('guilds')
