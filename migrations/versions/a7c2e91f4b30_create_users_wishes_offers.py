"""create users, wishes, offers tables

Revision ID: a7c2e91f4b30
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import TIMESTAMP


revision = 'a7c2e91f4b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('username', sa.String(30), nullable=False, unique=True),
        sa.Column('about', sa.String(200), nullable=False, server_default='Пока ничего не рассказал о себе'),
        sa.Column('avatar', sa.String(1024), nullable=False, server_default='https://i.pravatar.cc/300'),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'wishes',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('owner_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),

        sa.Column('title', sa.String(250), nullable=False),
        sa.Column('description', sa.String(1024), nullable=False),
        sa.Column('link', sa.Text, nullable=False),
        sa.Column('image', sa.Text, nullable=False),

        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('raised', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('copied', sa.Integer, nullable=False, server_default='0', index=True),

        sa.Column('created_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.Column('updated_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'offers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('wish_id', sa.Integer, sa.ForeignKey('wishes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('hidden', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('created_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table('offers')
    op.drop_table('wishes')
    op.drop_table('users')
