"""create exchange workflow tables

Revision ID: 3b1f0c7a9d21
Revises:
Create Date: 2026-10-19 09:12:40

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f0c7a9d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ROLE = sa.Enum('user', 'admin', 'super_admin', name='role')
STEP_TYPE = sa.Enum('form', 'upload', 'review', 'approval', name='step_type')
PROGRESS_STATUS = sa.Enum('pending', 'in_progress', 'completed', 'rejected', name='progress_status')
ADMIN_ACTION = sa.Enum('approve_step', 'reject_step', 'set_role', 'create_user', name='admin_action')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('refresh_token_version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', ROLE, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['id'], ['users.id'], name='fk_profiles_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_profiles'),
    )
    op.create_index('ix_profiles_role', 'profiles', ['role'])

    op.create_table(
        'programs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_programs'),
    )
    op.create_index('ix_programs_is_active', 'programs', ['is_active'])

    op.create_table(
        'user_programs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('program_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], name='fk_user_programs_user_id_profiles', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['program_id'], ['programs.id'], name='fk_user_programs_program_id_programs', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_user_programs'),
        sa.UniqueConstraint('user_id', 'program_id', name='uq_user_programs_user_program'),
    )
    op.create_index('ix_user_programs_user_id', 'user_programs', ['user_id'])
    op.create_index('ix_user_programs_program_id', 'user_programs', ['program_id'])

    op.create_table(
        'steps',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('step_type', STEP_TYPE, nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('form_fields', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_steps'),
    )
    op.create_index('ix_steps_order_index', 'steps', ['order_index'])
    op.create_index('ix_steps_is_active', 'steps', ['is_active'])

    op.create_table(
        'user_step_progress',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('step_id', sa.Uuid(), nullable=False),
        sa.Column('status', PROGRESS_STATUS, nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], name='fk_user_step_progress_user_id_profiles', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['step_id'], ['steps.id'], name='fk_user_step_progress_step_id_steps', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_user_step_progress'),
        sa.UniqueConstraint('user_id', 'step_id', name='uq_user_step_progress_user_step'),
    )
    op.create_index('ix_user_step_progress_user_id', 'user_step_progress', ['user_id'])
    op.create_index('ix_user_step_progress_step_id', 'user_step_progress', ['step_id'])
    op.create_index('ix_user_step_progress_status', 'user_step_progress', ['status'])

    op.create_table(
        'admin_action_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.Uuid(), nullable=False),
        sa.Column('target_user_id', sa.Uuid(), nullable=True),
        sa.Column('progress_id', sa.Uuid(), nullable=True),
        sa.Column('action', ADMIN_ACTION, nullable=False),
        sa.Column('before_value', sa.String(length=20), nullable=True),
        sa.Column('after_value', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id'], name='fk_admin_action_logs_actor_id_users'),
        sa.ForeignKeyConstraint(['target_user_id'], ['users.id'], name='fk_admin_action_logs_target_user_id_users'),
        sa.ForeignKeyConstraint(['progress_id'], ['user_step_progress.id'],
                                name='fk_admin_action_logs_progress_id_user_step_progress', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='pk_admin_action_logs'),
    )


def downgrade() -> None:
    op.drop_table('admin_action_logs')
    op.drop_index('ix_user_step_progress_status', table_name='user_step_progress')
    op.drop_index('ix_user_step_progress_step_id', table_name='user_step_progress')
    op.drop_index('ix_user_step_progress_user_id', table_name='user_step_progress')
    op.drop_table('user_step_progress')
    op.drop_index('ix_steps_is_active', table_name='steps')
    op.drop_index('ix_steps_order_index', table_name='steps')
    op.drop_table('steps')
    op.drop_index('ix_user_programs_program_id', table_name='user_programs')
    op.drop_index('ix_user_programs_user_id', table_name='user_programs')
    op.drop_table('user_programs')
    op.drop_index('ix_programs_is_active', table_name='programs')
    op.drop_table('programs')
    op.drop_index('ix_profiles_role', table_name='profiles')
    op.drop_table('profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (ADMIN_ACTION, PROGRESS_STATUS, STEP_TYPE, ROLE):
        enum_type.drop(bind, checkfirst=True)
