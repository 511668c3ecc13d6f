"""initial registration schema

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2025-10-20 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c2a7b9d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.CheckConstraint("role IN ('admin','secretary','accountant')", name='ck_users_role'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'students',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('matricule', sa.String(length=20), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('sex', sa.String(length=1), nullable=True),
        sa.Column('nationality', sa.String(length=50), nullable=True),
        sa.Column('birthplace', sa.String(length=100), nullable=True),
        sa.Column('grade_level', sa.String(length=20), nullable=True),
        sa.Column('previous_school', sa.String(length=200), nullable=True),
        sa.Column('blood_group', sa.String(length=5), nullable=True),
        sa.Column('medical_conditions', sa.Text(), nullable=True),
        sa.Column('medications', sa.Text(), nullable=True),
        sa.Column('physician_name', sa.String(length=200), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("sex IN ('M','F')", name='ck_students_sex'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('matricule'),
    )
    op.create_index('ix_students_grade_level', 'students', ['grade_level'])
    op.create_index('ix_students_name', 'students', ['last_name', 'first_name'])

    op.create_table(
        'guardians',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('email', sa.String(length=100), nullable=True),
        sa.Column('profession', sa.String(length=100), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('relation', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'student_guardians',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('guardian_id', sa.Uuid(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['guardian_id'], ['guardians.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'guardian_id', name='uq_student_guardian'),
    )
    op.create_index('ix_student_guardians_student_id', 'student_guardians', ['student_id'])
    op.create_index('ix_student_guardians_guardian_id', 'student_guardians', ['guardian_id'])
    # At most one primary guardian per student
    op.create_index(
        'uq_student_guardians_primary',
        'student_guardians',
        ['student_id'],
        unique=True,
        postgresql_where=sa.text('is_primary'),
        sqlite_where=sa.text('is_primary = 1'),
    )

    op.create_table(
        'emergency_contacts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('relation', sa.String(length=50), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_emergency_contacts_student_id', 'emergency_contacts', ['student_id'])

    op.create_table(
        'student_services',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('service_type', sa.String(length=20), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.CheckConstraint(
            "service_type IN ('transport','cafeteria','martial_arts','supplies')",
            name='ck_student_services_type',
        ),
        sa.CheckConstraint("status IN ('active','suspended','ended')", name='ck_student_services_status'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_student_services_student_id', 'student_services', ['student_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('payment_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('payment_mode', sa.String(length=50), nullable=True),
        sa.Column('reference', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=False),
        sa.Column('settled_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.CheckConstraint("payment_type IN ('enrollment','re_enrollment')", name='ck_payments_type'),
        sa.CheckConstraint("status IN ('pending','complete','cancelled')", name='ck_payments_status'),
        sa.CheckConstraint('amount >= 0', name='ck_payments_amount_positive'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payments_student_paid_at', 'payments', ['student_id', 'paid_at'])

    op.create_table(
        'documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('document_type', sa.String(length=50), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('path', sa.String(length=500), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_documents_student_id', 'documents', ['student_id'])

    op.create_table(
        're_enrollments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('previous_grade_level', sa.String(length=20), nullable=True),
        sa.Column('new_grade_level', sa.String(length=20), nullable=False),
        sa.Column('school_year', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_re_enrollments_student_id', 're_enrollments', ['student_id'])

    op.create_table(
        'tariffs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('grade_level', sa.String(length=20), nullable=False),
        sa.Column('enrollment_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('monthly_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('re_enrollment_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('grade_level'),
    )

    op.create_table(
        'matricule_counters',
        sa.Column('name', sa.String(length=32), nullable=False),
        sa.Column('last_value', sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )


def downgrade():
    op.drop_table('matricule_counters')
    op.drop_table('tariffs')
    op.drop_index('ix_re_enrollments_student_id', table_name='re_enrollments')
    op.drop_table('re_enrollments')
    op.drop_index('ix_documents_student_id', table_name='documents')
    op.drop_table('documents')
    op.drop_index('ix_payments_student_paid_at', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_student_services_student_id', table_name='student_services')
    op.drop_table('student_services')
    op.drop_index('ix_emergency_contacts_student_id', table_name='emergency_contacts')
    op.drop_table('emergency_contacts')
    op.drop_index('uq_student_guardians_primary', table_name='student_guardians')
    op.drop_index('ix_student_guardians_guardian_id', table_name='student_guardians')
    op.drop_index('ix_student_guardians_student_id', table_name='student_guardians')
    op.drop_table('student_guardians')
    op.drop_table('guardians')
    op.drop_index('ix_students_name', table_name='students')
    op.drop_index('ix_students_grade_level', table_name='students')
    op.drop_table('students')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
