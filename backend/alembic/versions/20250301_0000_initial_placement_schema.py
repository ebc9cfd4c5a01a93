"""initial_placement_schema

Revision ID: 20250301_0000
Revises:
Create Date: 2025-03-01 00:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa
from app.database_types import GUID


revision = '20250301_0000'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('role', sa.Enum('USER', 'ADMIN', name='user_role'), nullable=False),
        sa.Column('magic_link_token', sa.String(), nullable=True),
        sa.Column('magic_link_expires_at', sa.DateTime(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=False)
    op.create_index(
        'uq_users_email_active',
        'users',
        ['email'],
        unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
        sqlite_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
    op.create_index(op.f('ix_users_magic_link_token'), 'users', ['magic_link_token'], unique=False)
    op.create_index(op.f('ix_users_deleted_at'), 'users', ['deleted_at'], unique=False)

    op.create_table(
        'authorized_school_domains',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('domain', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_authorized_school_domains_domain'), 'authorized_school_domains', ['domain'], unique=True)
    op.create_index(op.f('ix_authorized_school_domains_deleted_at'), 'authorized_school_domains', ['deleted_at'], unique=False)

    op.create_table(
        'schools',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('domain_id', GUID(), nullable=False),
        sa.Column('logo', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['domain_id'], ['authorized_school_domains.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_schools_domain_id'), 'schools', ['domain_id'], unique=False)
    op.create_index(op.f('ix_schools_deleted_at'), 'schools', ['deleted_at'], unique=False)

    op.create_table(
        'companies',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('logo', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_companies_name'), 'companies', ['name'], unique=False)
    op.create_index(op.f('ix_companies_deleted_at'), 'companies', ['deleted_at'], unique=False)

    op.create_table(
        'company_owners',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('user_id', GUID(), nullable=False),
        sa.Column('company_id', GUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'company_id', name='uq_company_owner'),
    )
    op.create_index(op.f('ix_company_owners_user_id'), 'company_owners', ['user_id'], unique=False)
    op.create_index(op.f('ix_company_owners_company_id'), 'company_owners', ['company_id'], unique=False)

    op.create_table(
        'students',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('user_id', GUID(), nullable=False),
        sa.Column('school_id', GUID(), nullable=True),
        sa.Column('student_email', sa.String(), nullable=True),
        sa.Column('skills', sa.Text(), nullable=False),
        sa.Column('apprenticeship_rhythm', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('previous_companies', sa.Text(), nullable=True),
        sa.Column('availability', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_students_user_id'), 'students', ['user_id'], unique=True)
    op.create_index(op.f('ix_students_school_id'), 'students', ['school_id'], unique=False)
    op.create_index(op.f('ix_students_deleted_at'), 'students', ['deleted_at'], unique=False)

    op.create_table(
        'jobs',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('company_id', GUID(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('skills', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_jobs_company_id'), 'jobs', ['company_id'], unique=False)
    op.create_index(op.f('ix_jobs_deleted_at'), 'jobs', ['deleted_at'], unique=False)

    op.create_table(
        'job_requests',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('student_id', GUID(), nullable=False),
        sa.Column('job_id', GUID(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='PENDING'),
        sa.Column('subject', sa.String(255), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['students.id']),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_job_requests_student_id'), 'job_requests', ['student_id'], unique=False)
    op.create_index(op.f('ix_job_requests_job_id'), 'job_requests', ['job_id'], unique=False)
    op.create_index(op.f('ix_job_requests_deleted_at'), 'job_requests', ['deleted_at'], unique=False)
    # One live application per (student, job)
    op.create_index(
        'uq_job_requests_student_job_active',
        'job_requests',
        ['student_id', 'job_id'],
        unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
        sqlite_where=sa.text('deleted_at IS NULL'),
    )

    op.create_table(
        'notification_outbox',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('job_request_id', GUID(), nullable=False),
        sa.Column('recipient_email', sa.String(), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('html_content', sa.Text(), nullable=False),
        sa.Column('text_content', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('attempt_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('claimed_at', sa.DateTime(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['job_request_id'], ['job_requests.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notification_outbox_job_request_id'), 'notification_outbox', ['job_request_id'], unique=False)
    op.create_index('idx_outbox_status', 'notification_outbox', ['status', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_outbox_status', table_name='notification_outbox')
    op.drop_index(op.f('ix_notification_outbox_job_request_id'), table_name='notification_outbox')
    op.drop_table('notification_outbox')

    op.drop_index('uq_job_requests_student_job_active', table_name='job_requests')
    op.drop_index(op.f('ix_job_requests_deleted_at'), table_name='job_requests')
    op.drop_index(op.f('ix_job_requests_job_id'), table_name='job_requests')
    op.drop_index(op.f('ix_job_requests_student_id'), table_name='job_requests')
    op.drop_table('job_requests')

    op.drop_index(op.f('ix_jobs_deleted_at'), table_name='jobs')
    op.drop_index(op.f('ix_jobs_company_id'), table_name='jobs')
    op.drop_table('jobs')

    op.drop_index(op.f('ix_students_deleted_at'), table_name='students')
    op.drop_index(op.f('ix_students_school_id'), table_name='students')
    op.drop_index(op.f('ix_students_user_id'), table_name='students')
    op.drop_table('students')

    op.drop_index(op.f('ix_company_owners_company_id'), table_name='company_owners')
    op.drop_index(op.f('ix_company_owners_user_id'), table_name='company_owners')
    op.drop_table('company_owners')

    op.drop_index(op.f('ix_companies_deleted_at'), table_name='companies')
    op.drop_index(op.f('ix_companies_name'), table_name='companies')
    op.drop_table('companies')

    op.drop_index(op.f('ix_schools_deleted_at'), table_name='schools')
    op.drop_index(op.f('ix_schools_domain_id'), table_name='schools')
    op.drop_table('schools')

    op.drop_index(op.f('ix_authorized_school_domains_deleted_at'), table_name='authorized_school_domains')
    op.drop_index(op.f('ix_authorized_school_domains_domain'), table_name='authorized_school_domains')
    op.drop_table('authorized_school_domains')

    op.drop_index(op.f('ix_users_deleted_at'), table_name='users')
    op.drop_index(op.f('ix_users_magic_link_token'), table_name='users')
    op.drop_index(op.f('ix_users_role'), table_name='users')
    op.drop_index('uq_users_email_active', table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
    sa.Enum(name='user_role').drop(op.get_bind(), checkfirst=True)
