"""Training plan, workout feedback and training adjustment tables

Revision ID: adaptive_001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'adaptive_001'
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        'training_plan',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('goal_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('plan_name', sa.Text(), nullable=False),
        sa.Column('plan_type', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default='active', nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('current_week', sa.Integer(), server_default='1', nullable=True),
        sa.Column('weekly_schedule', JSONType, nullable=False),
        sa.Column('preferences', JSONType, nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_training_plan_user_id', 'training_plan', ['user_id'], unique=False)
    op.create_index('ix_training_plan_status', 'training_plan', ['status'], unique=False)

    op.create_table(
        'workout_feedback',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('training_plan_id', sa.Integer(), nullable=False),
        sa.Column('workout_date', sa.Date(), nullable=False),
        sa.Column('workout_type', sa.Text(), server_default='run', nullable=False),
        sa.Column('planned_distance', sa.Numeric(5, 2), nullable=True),
        sa.Column('actual_distance', sa.Numeric(5, 2), nullable=True),
        sa.Column('planned_duration', sa.Integer(), nullable=True),
        sa.Column('actual_duration', sa.Integer(), nullable=True),
        sa.Column('completed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('difficulty_rating', sa.Integer(), nullable=True),
        sa.Column('effort_rating', sa.Integer(), nullable=True),
        sa.Column('enjoyment_rating', sa.Integer(), nullable=True),
        sa.Column('energy_level', sa.Integer(), nullable=True),
        sa.Column('recovery_rating', sa.Integer(), nullable=True),
        sa.Column('pace_achieved', sa.Text(), nullable=True),
        sa.Column('weather_conditions', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_workout_feedback_user_plan', 'workout_feedback', ['user_id', 'training_plan_id'], unique=False)
    op.create_index('ix_workout_feedback_workout_date', 'workout_feedback', ['workout_date'], unique=False)

    op.create_table(
        'training_adjustment',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('training_plan_id', sa.Integer(), nullable=False),
        sa.Column('adjustment_date', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('adjustment_type', sa.Text(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('previous_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('difficulty_multiplier', sa.Text(), nullable=False),
        sa.Column('performance_score', sa.Text(), nullable=True),
        sa.Column('automatic_adjustment', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_training_adjustment_plan_id', 'training_adjustment', ['training_plan_id'], unique=False)
    op.create_index('ix_training_adjustment_adjustment_date', 'training_adjustment', ['adjustment_date'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_training_adjustment_adjustment_date', table_name='training_adjustment')
    op.drop_index('ix_training_adjustment_plan_id', table_name='training_adjustment')
    op.drop_table('training_adjustment')
    op.drop_index('ix_workout_feedback_workout_date', table_name='workout_feedback')
    op.drop_index('ix_workout_feedback_user_plan', table_name='workout_feedback')
    op.drop_table('workout_feedback')
    op.drop_index('ix_training_plan_status', table_name='training_plan')
    op.drop_index('ix_training_plan_user_id', table_name='training_plan')
    op.drop_table('training_plan')
