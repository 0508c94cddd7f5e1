"""Create hospital document schema.

Revision ID: 20261019_001
Revises:
Create Date: 2026-10-19

Users and sessions, download center, workflows and circulation,
personal storage and the activity log.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision = '20261019_001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.Text(), nullable=False, unique=True),
        sa.Column('password', sa.Text(), nullable=False),
        sa.Column('display_name', sa.Text(), nullable=False),
        sa.Column('department', sa.Text(), nullable=False),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('profile_image', sa.Text(), nullable=True),
    )
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'user_sessions',
        sa.Column('session_id', sa.String(64), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_activity', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
    )
    op.create_index('idx_user_sessions_user', 'user_sessions', ['user_id'])
    op.create_index('idx_user_sessions_expires', 'user_sessions', ['expires_at'])

    op.create_table(
        'document_categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('document_categories.id'), nullable=True),
    )

    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('file_name', sa.Text(), nullable=False),
        sa.Column('file_type', sa.Text(), nullable=False),
        sa.Column('file_path', sa.Text(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('upload_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('document_categories.id'), nullable=True),
        sa.Column('uploaded_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('download_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tags', JSONB(), nullable=False, server_default='[]'),
        sa.Column('access_roles', JSONB(), nullable=False, server_default='[]'),
        sa.Column('access_departments', JSONB(), nullable=False, server_default='[]'),
    )
    op.create_index('ix_documents_category_id', 'documents', ['category_id'])

    op.create_table(
        'download_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('document_id', sa.Integer(), sa.ForeignKey('documents.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('download_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('ip_address', sa.Text()),
    )
    op.create_index('ix_download_history_document_id', 'download_history', ['document_id'])

    op.create_table(
        'workflows',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('steps', JSONB(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default='false'),
    )

    op.create_table(
        'circulation_documents',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('document_number', sa.Text(), nullable=False),
        sa.Column('content', sa.Text()),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('current_step', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('workflow_id', sa.Integer(), sa.ForeignKey('workflows.id'), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('file_path', sa.Text()),
        sa.Column('file_type', sa.Text()),
        sa.Column('assigned_to', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('comments', JSONB(), nullable=False, server_default='[]'),
        sa.Column('tags', JSONB(), nullable=False, server_default='[]'),
    )
    op.create_index('ix_circulation_documents_status', 'circulation_documents', ['status'])
    op.create_index('ix_circulation_documents_created_by', 'circulation_documents', ['created_by'])
    op.create_index('ix_circulation_documents_assigned_to', 'circulation_documents', ['assigned_to'])

    op.create_table(
        'storage_files',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('file_path', sa.Text(), nullable=False),
        sa.Column('file_type', sa.Text(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('upload_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_modified', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('storage_files.id'), nullable=True),
        sa.Column('is_folder', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('access_level', sa.Text(), nullable=False),
        sa.Column('shared_with', JSONB(), nullable=False, server_default='[]'),
    )
    op.create_index('idx_storage_files_owner_parent', 'storage_files', ['owner_id', 'parent_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('resource_type', sa.Text(), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=False),
        sa.Column('details', JSONB()),
    )
    op.create_index('idx_activity_logs_timestamp', 'activity_logs', ['timestamp'])
    op.create_index('idx_activity_logs_resource', 'activity_logs', ['resource_type', 'resource_id'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('activity_logs')
    op.drop_table('storage_files')
    op.drop_table('circulation_documents')
    op.drop_table('workflows')
    op.drop_table('download_history')
    op.drop_table('documents')
    op.drop_table('document_categories')
    op.drop_table('user_sessions')
    op.drop_table('users')
