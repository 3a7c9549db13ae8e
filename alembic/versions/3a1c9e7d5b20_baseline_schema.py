"""baseline_schema

Revision ID: 3a1c9e7d5b20
Revises:
Create Date: 2026-10-19 09:12:41.118204

Creates users, plans, subscriptions, payments, the analysis cache, tailored
resumes, documents/chunks, chat sessions/messages and citations.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '3a1c9e7d5b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    ]


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=False),
            sa.Column('role', sa.String(), server_default='free', nullable=False),
            sa.Column('name', sa.String(), nullable=True),
            sa.Column('address', sa.String(), nullable=True),
            sa.Column('profile_picture_url', sa.String(), nullable=True),
            sa.Column('preferences', sa.JSON(), nullable=False),
            sa.Column('practice_areas', sa.JSON(), nullable=False),
            sa.Column('last_active', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)

    if not table_exists('subscription_plans'):
        op.create_table('subscription_plans',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('price', sa.Numeric(10, 2), nullable=False),
            sa.Column('currency', sa.String(3), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('features', sa.JSON(), nullable=False),
            sa.Column('tier_level', sa.Integer(), nullable=False),
            sa.Column('duration_days', sa.Integer(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('name'),
            sa.UniqueConstraint('tier_level')
        )
        op.create_index(op.f('ix_subscription_plans_id'), 'subscription_plans', ['id'], unique=False)

    if not table_exists('subscriptions'):
        op.create_table('subscriptions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('plan_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
            sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
            sa.Column('payment_reference', sa.String(), nullable=True),
            sa.Column('customer_reference', sa.String(), nullable=True),
            sa.Column('auto_renew', sa.Boolean(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['plan_id'], ['subscription_plans.id'], ondelete='RESTRICT'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('payment_reference')
        )
        op.create_index(op.f('ix_subscriptions_id'), 'subscriptions', ['id'], unique=False)
        op.create_index(op.f('ix_subscriptions_user_id'), 'subscriptions', ['user_id'], unique=False)
        op.create_index(op.f('ix_subscriptions_status'), 'subscriptions', ['status'], unique=False)
        op.create_index('idx_subscriptions_user_status', 'subscriptions', ['user_id', 'status'], unique=False)

    if not table_exists('payment_transactions'):
        op.create_table('payment_transactions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('subscription_id', sa.Integer(), nullable=True),
            sa.Column('amount', sa.Numeric(10, 2), nullable=False),
            sa.Column('currency', sa.String(3), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('reference', sa.String(), nullable=False),
            sa.Column('gateway', sa.String(), nullable=False),
            sa.Column('gateway_response', sa.JSON(), nullable=False),
            sa.Column('transaction_type', sa.String(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['subscription_id'], ['subscriptions.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_payment_transactions_id'), 'payment_transactions', ['id'], unique=False)
        op.create_index(op.f('ix_payment_transactions_user_id'), 'payment_transactions', ['user_id'], unique=False)
        op.create_index(op.f('ix_payment_transactions_reference'), 'payment_transactions', ['reference'], unique=True)

    if not table_exists('resume_analyses'):
        op.create_table('resume_analyses',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('resume_hash', sa.String(64), nullable=False),
            sa.Column('job_description_hash', sa.String(64), nullable=False),
            sa.Column('compatibility_score', sa.Integer(), nullable=False),
            sa.Column('keyword_matches', sa.JSON(), nullable=False),
            sa.Column('skill_gaps', sa.JSON(), nullable=False),
            sa.Column('experience_gaps', sa.JSON(), nullable=False),
            sa.Column('analysis_details', sa.JSON(), nullable=False),
            sa.Column('analysis_types', sa.JSON(), nullable=False),
            sa.Column('original_resume_text', sa.Text(), nullable=False),
            sa.Column('original_job_description', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'resume_hash', 'job_description_hash', name='uq_analysis_fingerprint')
        )
        op.create_index(op.f('ix_resume_analyses_id'), 'resume_analyses', ['id'], unique=False)
        op.create_index(op.f('ix_resume_analyses_user_id'), 'resume_analyses', ['user_id'], unique=False)
        op.create_index(op.f('ix_resume_analyses_created_at'), 'resume_analyses', ['created_at'], unique=False)
        op.create_index('idx_analysis_user_created', 'resume_analyses', ['user_id', 'created_at'], unique=False)

    if not table_exists('tailored_resumes'):
        op.create_table('tailored_resumes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('analysis_id', sa.Integer(), nullable=False),
            sa.Column('tailored_resume', sa.Text(), nullable=False),
            sa.Column('improvements', sa.JSON(), nullable=False),
            sa.Column('cover_letter', sa.Text(), nullable=True),
            sa.Column('cover_letter_key_points', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['analysis_id'], ['resume_analyses.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('analysis_id')
        )
        op.create_index(op.f('ix_tailored_resumes_id'), 'tailored_resumes', ['id'], unique=False)
        op.create_index(op.f('ix_tailored_resumes_user_id'), 'tailored_resumes', ['user_id'], unique=False)

    if not table_exists('documents'):
        op.create_table('documents',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('original_filename', sa.String(), nullable=False),
            sa.Column('file_type', sa.String(), nullable=False),
            sa.Column('file_size', sa.BigInteger(), nullable=True),
            sa.Column('storage_path', sa.String(), nullable=True),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('processing_error', sa.Text(), nullable=True),
            sa.Column('total_chunks', sa.Integer(), nullable=False),
            sa.Column('metadata', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_documents_id'), 'documents', ['id'], unique=False)
        op.create_index(op.f('ix_documents_user_id'), 'documents', ['user_id'], unique=False)
        op.create_index(op.f('ix_documents_status'), 'documents', ['status'], unique=False)
        op.create_index(op.f('ix_documents_created_at'), 'documents', ['created_at'], unique=False)
        op.create_index('idx_documents_user_created', 'documents', ['user_id', 'created_at'], unique=False)

    if not table_exists('document_chunks'):
        op.create_table('document_chunks',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('document_id', sa.Integer(), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('embedding', sa.JSON(), nullable=True),
            sa.Column('chunk_number', sa.Integer(), nullable=False),
            sa.Column('chunk_size', sa.Integer(), nullable=True),
            sa.Column('metadata', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.ForeignKeyConstraint(['document_id'], ['documents.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_document_chunks_id'), 'document_chunks', ['id'], unique=False)
        op.create_index(op.f('ix_document_chunks_document_id'), 'document_chunks', ['document_id'], unique=False)

    if not table_exists('chat_sessions'):
        op.create_table('chat_sessions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('is_archived', sa.Boolean(), nullable=False),
            sa.Column('message_count', sa.Integer(), nullable=False),
            sa.Column('last_message_at', sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_chat_sessions_id'), 'chat_sessions', ['id'], unique=False)
        op.create_index(op.f('ix_chat_sessions_user_id'), 'chat_sessions', ['user_id'], unique=False)

    if not table_exists('messages'):
        op.create_table('messages',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('session_id', sa.Integer(), nullable=False),
            sa.Column('sender', sa.String(), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('is_citation', sa.Boolean(), nullable=False),
            sa.Column('citation_metadata', sa.JSON(), nullable=False),
            sa.Column('tokens_used', sa.Integer(), nullable=False),
            sa.Column('model_used', sa.String(), nullable=True),
            sa.Column('processing_time_ms', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['session_id'], ['chat_sessions.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_messages_id'), 'messages', ['id'], unique=False)
        op.create_index(op.f('ix_messages_session_id'), 'messages', ['session_id'], unique=False)
        op.create_index(op.f('ix_messages_created_at'), 'messages', ['created_at'], unique=False)
        op.create_index('idx_messages_session_created', 'messages', ['session_id', 'created_at'], unique=False)

    if not table_exists('citations'):
        op.create_table('citations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('document_chunk_id', sa.Integer(), nullable=True),
            sa.Column('case_name', sa.String(), nullable=True),
            sa.Column('citation_text', sa.Text(), nullable=False),
            sa.Column('court', sa.String(), nullable=True),
            sa.Column('year', sa.Integer(), nullable=True),
            sa.Column('url', sa.String(), nullable=True),
            sa.Column('case_type', sa.String(), nullable=True),
            sa.Column('jurisdiction', sa.String(), nullable=False),
            sa.Column('metadata', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.ForeignKeyConstraint(['document_chunk_id'], ['document_chunks.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_citations_id'), 'citations', ['id'], unique=False)
        op.create_index(op.f('ix_citations_case_name'), 'citations', ['case_name'], unique=False)


def downgrade() -> None:
    for table in (
        'citations', 'messages', 'chat_sessions', 'document_chunks', 'documents',
        'tailored_resumes', 'resume_analyses', 'payment_transactions',
        'subscriptions', 'subscription_plans', 'users',
    ):
        if table_exists(table):
            op.drop_table(table)
