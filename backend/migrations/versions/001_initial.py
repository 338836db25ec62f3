"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Creates all database tables for the Code Attendance Service:
- users: Identity directory (id, name, role)
- attendance_sessions: Code-identified attendance windows
- attendance_records: One signature per student per session

The unique constraints on attendance_records back the admission rules when
several students sign concurrently.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Users Table ───────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('role', sa.String(16), nullable=False),
        sa.Column('created_at', sa.DateTime(),
                  server_default=sa.func.now(), nullable=False),
    )

    # ── Attendance Sessions Table ─────────────────────────────
    op.create_table(
        'attendance_sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('owner_id', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
    )

    op.create_index('ix_attendance_sessions_code', 'attendance_sessions', ['code'])
    op.create_index('ix_attendance_sessions_owner_id', 'attendance_sessions', ['owner_id'])
    op.create_index('ix_attendance_sessions_created_at', 'attendance_sessions', ['created_at'])

    # ── Attendance Records Table ──────────────────────────────
    op.create_table(
        'attendance_records',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('session_id', sa.String(36),
                  sa.ForeignKey('attendance_sessions.id'), nullable=False),
        sa.Column('student_id', sa.Text(), nullable=False),
        sa.Column('student_name', sa.Text(), nullable=False),
        sa.Column('signed_at', sa.DateTime(), nullable=False),
        sa.Column('device_fingerprint', sa.String(64), nullable=True),
        sa.UniqueConstraint('session_id', 'student_id',
                            name='uq_attendance_records_session_student'),
        sa.UniqueConstraint('session_id', 'device_fingerprint',
                            name='uq_attendance_records_session_device'),
    )

    op.create_index('ix_attendance_records_student_id', 'attendance_records', ['student_id'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index('ix_attendance_records_student_id', table_name='attendance_records')
    op.drop_table('attendance_records')
    op.drop_index('ix_attendance_sessions_created_at', table_name='attendance_sessions')
    op.drop_index('ix_attendance_sessions_owner_id', table_name='attendance_sessions')
    op.drop_index('ix_attendance_sessions_code', table_name='attendance_sessions')
    op.drop_table('attendance_sessions')
    op.drop_table('users')
