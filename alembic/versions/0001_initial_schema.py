"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-03-02 09:00:00.000000

This migration creates the school administration schema:
- users: admin and teacher accounts with reminder preferences
- students, exam_results: enrollment, biodata and terminal exam marks
- school_settings: academic year, grade subjects and class teachers
- calendar_events, event_announcements: school calendar and reminder ledger
- notifications: in-app notifications
- transfer_certificates: issued TCs with a snapshot of the student
- staff: teaching and non-teaching staff records
- student_attendance, staff_attendance: daily registers
- hostel_rooms, hostel_residents, hostel_staff: hostel management

It also seeds the default admin account (username: admin).
"""
from typing import Sequence, Union
from datetime import datetime, timezone

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.sql import text
from passlib.context import CryptContext


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Password hashing for seeding
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

GRADE_NAMES = (
    'NURSERY', 'KINDERGARTEN', 'I', 'II', 'III', 'IV', 'V',
    'VI', 'VII', 'VIII', 'IX', 'X',
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    ]


def upgrade() -> None:
    """Create all tables and seed the admin account."""
    conn = op.get_bind()
    now = datetime.now(timezone.utc)

    print("🏫 Creating school administration tables...")

    # 1. users
    op.create_table(
        'users',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'TEACHER', name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reminder_lead_days', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    # 2. students
    op.create_table(
        'students',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('roll_no', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('grade', sa.Enum(*GRADE_NAMES, name='grade'), nullable=False),
        sa.Column('contact', sa.String(length=50), nullable=True),
        sa.Column('photograph_url', sa.Text(), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.Enum('MALE', 'FEMALE', 'OTHER', name='gender'), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('aadhaar_number', sa.String(length=20), nullable=True),
        sa.Column('pen', sa.String(length=50), nullable=True),
        sa.Column('category', sa.Enum('GENERAL', 'SC', 'ST', 'OBC', name='category'), nullable=True),
        sa.Column('religion', sa.String(length=100), nullable=True),
        sa.Column('father_name', sa.String(length=255), nullable=True),
        sa.Column('mother_name', sa.String(length=255), nullable=True),
        sa.Column('guardian_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.Enum('ACTIVE', 'TRANSFERRED', name='studentstatus'), nullable=False),
        sa.Column('exit_date', sa.Date(), nullable=True),
        sa.Column('fee_payments', postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_students_grade', 'students', ['grade'])
    op.create_index('ix_students_status', 'students', ['status'])

    # 3. exam_results
    op.create_table(
        'exam_results',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('student_id', sa.BigInteger(), nullable=False),
        sa.Column('exam_id', sa.String(length=20), nullable=False),
        sa.Column('subject', sa.String(length=100), nullable=False),
        sa.Column('marks', sa.DECIMAL(6, 2), nullable=True),
        sa.Column('exam_marks', sa.DECIMAL(6, 2), nullable=True),
        sa.Column('activity_marks', sa.DECIMAL(6, 2), nullable=True),
        sa.Column('grade', sa.String(length=2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'exam_id', 'subject', name='uq_exam_result_student_subject'),
    )
    op.create_index('ix_exam_results_student_id', 'exam_results', ['student_id'])
    op.create_index('ix_exam_results_exam_id', 'exam_results', ['exam_id'])

    # 4. school_settings
    op.create_table(
        'school_settings',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('key'),
    )

    # 5. calendar_events
    op.create_table(
        'calendar_events',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column(
            'event_type',
            sa.Enum('HOLIDAY', 'EXAM', 'EVENT', 'MEETING', name='calendareventtype'),
            nullable=False,
        ),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_calendar_events_event_date', 'calendar_events', ['event_date'])

    # 6. event_announcements
    op.create_table(
        'event_announcements',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.Column('event_key', sa.String(length=100), nullable=False),
        sa.Column('announced_on', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'event_key', 'announced_on', name='uq_announcement_user_event_day'),
    )
    op.create_index('ix_event_announcements_user_id', 'event_announcements', ['user_id'])
    op.create_index('ix_event_announcements_announced_on', 'event_announcements', ['announced_on'])

    # 7. notifications
    op.create_table(
        'notifications',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('notification_type', sa.String(length=50), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('action_url', sa.Text(), nullable=True),
        sa.Column('action_data', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    op.create_index(
        'ix_notifications_user_type_created',
        'notifications',
        ['user_id', 'notification_type', 'created_at'],
    )

    # 8. transfer_certificates
    op.create_table(
        'transfer_certificates',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('ref_no', sa.String(length=100), nullable=False),
        sa.Column('student_id', sa.BigInteger(), nullable=False),
        sa.Column('student_details', postgresql.JSONB(), nullable=False),
        sa.Column('date_of_birth_in_words', sa.String(length=255), nullable=True),
        sa.Column('school_dues', sa.String(length=255), nullable=True),
        sa.Column('qualified_for_promotion', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_attendance_date', sa.Date(), nullable=True),
        sa.Column('application_date', sa.Date(), nullable=True),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('reason_for_leaving', sa.Text(), nullable=True),
        sa.Column('general_conduct', sa.String(length=100), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transfer_certificates_ref_no', 'transfer_certificates', ['ref_no'], unique=True)
    op.create_index('ix_transfer_certificates_student_id', 'transfer_certificates', ['student_id'])

    # 9. staff
    op.create_table(
        'staff',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('staff_type', sa.Enum('TEACHING', 'NON_TEACHING', name='stafftype'), nullable=False),
        sa.Column('employee_id', sa.String(length=50), nullable=False),
        sa.Column('user_id', sa.BigInteger(), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('gender', postgresql.ENUM(name='gender', create_type=False), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('nationality', sa.String(length=100), nullable=True),
        sa.Column(
            'marital_status',
            sa.Enum('SINGLE', 'MARRIED', 'DIVORCED', 'WIDOWED', name='maritalstatus'),
            nullable=True,
        ),
        sa.Column('photograph_url', sa.Text(), nullable=True),
        sa.Column(
            'blood_group',
            sa.Enum(
                'A_POSITIVE', 'A_NEGATIVE', 'B_POSITIVE', 'B_NEGATIVE',
                'AB_POSITIVE', 'AB_NEGATIVE', 'O_POSITIVE', 'O_NEGATIVE',
                name='bloodgroup',
            ),
            nullable=True,
        ),
        sa.Column('aadhaar_number', sa.String(length=20), nullable=True),
        sa.Column('contact_number', sa.String(length=50), nullable=True),
        sa.Column('email_address', sa.String(length=255), nullable=True),
        sa.Column('permanent_address', sa.Text(), nullable=True),
        sa.Column('current_address', sa.Text(), nullable=True),
        sa.Column(
            'educational_qualification',
            sa.Enum(
                'SSLC', 'HSLC', 'HSSLC', 'GRADUATE', 'POST_GRADUATE',
                'B_ED', 'M_ED', 'PHD', 'DIPLOMA', 'OTHER',
                name='qualification',
            ),
            nullable=True,
        ),
        sa.Column('specialization', sa.String(length=255), nullable=True),
        sa.Column('years_of_experience', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('previous_experience', sa.Text(), nullable=True),
        sa.Column('date_of_joining', sa.Date(), nullable=False),
        sa.Column(
            'department',
            sa.Enum(
                'ADMINISTRATION', 'SCIENCE', 'MATHEMATICS', 'SOCIAL_STUDIES', 'LANGUAGES',
                'COMPUTER_SCIENCE', 'ARTS', 'SPORTS', 'SUPPORT_STAFF',
                name='department',
            ),
            nullable=False,
        ),
        sa.Column(
            'designation',
            sa.Enum(
                'PRINCIPAL', 'HEAD_OF_DEPARTMENT', 'TEACHER', 'SPORTS_TEACHER',
                'LAB_ASSISTANT', 'LIBRARIAN', 'CLERK',
                name='designation',
            ),
            nullable=False,
        ),
        sa.Column(
            'employee_type',
            sa.Enum('FULL_TIME', 'PART_TIME', 'CONTRACT', name='employeetype'),
            nullable=False,
        ),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'ON_LEAVE', 'RESIGNED', 'RETIRED', name='employmentstatus'),
            nullable=False,
        ),
        sa.Column('subjects_taught', postgresql.JSONB(), nullable=True),
        sa.Column('teacher_license_number', sa.String(length=100), nullable=True),
        sa.Column('salary_grade', sa.String(length=50), nullable=True),
        sa.Column('basic_salary', sa.DECIMAL(12, 2), nullable=True),
        sa.Column('bank_account_number', sa.String(length=50), nullable=True),
        sa.Column('bank_name', sa.String(length=255), nullable=True),
        sa.Column('pan_number', sa.String(length=20), nullable=True),
        sa.Column('emergency_contact_name', sa.String(length=255), nullable=True),
        sa.Column('emergency_contact_relationship', sa.String(length=100), nullable=True),
        sa.Column('emergency_contact_number', sa.String(length=50), nullable=True),
        sa.Column('medical_conditions', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('ix_staff_employee_id', 'staff', ['employee_id'], unique=True)
    op.create_index('ix_staff_staff_type', 'staff', ['staff_type'])
    op.create_index('ix_staff_department', 'staff', ['department'])
    op.create_index('ix_staff_status', 'staff', ['status'])

    # 10. student_attendance
    op.create_table(
        'student_attendance',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('student_id', sa.BigInteger(), nullable=False),
        sa.Column('grade', postgresql.ENUM(name='grade', create_type=False), nullable=False),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PRESENT', 'ABSENT', 'LATE', 'EXCUSED', name='attendancestatus'),
            nullable=False,
        ),
        sa.Column('remarks', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'attendance_date', name='uq_student_attendance_student_date'),
    )
    op.create_index('ix_student_attendance_student_id', 'student_attendance', ['student_id'])
    op.create_index('ix_student_attendance_grade', 'student_attendance', ['grade'])
    op.create_index('ix_student_attendance_attendance_date', 'student_attendance', ['attendance_date'])

    # 11. staff_attendance
    op.create_table(
        'staff_attendance',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('staff_id', sa.BigInteger(), nullable=False),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PRESENT', 'ABSENT', 'LEAVE', name='staffattendancestatus'),
            nullable=False,
        ),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('marked_by_id', sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['marked_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('staff_id', 'attendance_date', name='uq_staff_attendance_staff_date'),
    )
    op.create_index('ix_staff_attendance_staff_id', 'staff_attendance', ['staff_id'])
    op.create_index('ix_staff_attendance_attendance_date', 'staff_attendance', ['attendance_date'])

    # 12. hostel_rooms
    op.create_table(
        'hostel_rooms',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('block', sa.Enum('A', 'B', 'C', name='hostelblock'), nullable=False),
        sa.Column('room_number', sa.Integer(), nullable=False),
        sa.Column(
            'room_type',
            sa.Enum('SINGLE', 'DOUBLE', 'DORMITORY', name='roomtype'),
            nullable=False,
        ),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('facilities', postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('block', 'room_number', name='uq_hostel_room_block_number'),
    )
    op.create_index('ix_hostel_rooms_block', 'hostel_rooms', ['block'])

    # 13. hostel_residents
    op.create_table(
        'hostel_residents',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('student_id', sa.BigInteger(), nullable=False),
        sa.Column('registration_id', sa.String(length=50), nullable=False),
        sa.Column('room_id', sa.BigInteger(), nullable=False),
        sa.Column('date_of_joining', sa.Date(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['room_id'], ['hostel_rooms.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id'),
    )
    op.create_index('ix_hostel_residents_registration_id', 'hostel_residents', ['registration_id'], unique=True)
    op.create_index('ix_hostel_residents_room_id', 'hostel_residents', ['room_id'])

    # 14. hostel_staff
    op.create_table(
        'hostel_staff',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('gender', postgresql.ENUM(name='gender', create_type=False), nullable=False),
        sa.Column(
            'role',
            sa.Enum(
                'WARDEN', 'MESS_MANAGER', 'MESS_COOK', 'MESS_HELPER', 'SECURITY', 'CLEANING_STAFF',
                name='hostelstaffrole',
            ),
            nullable=False,
        ),
        sa.Column('photograph_url', sa.String(length=500), nullable=True),
        sa.Column('contact_number', sa.String(length=50), nullable=True),
        sa.Column('date_of_joining', sa.Date(), nullable=False),
        sa.Column('duty_shift', sa.String(length=100), nullable=True),
        sa.Column('assigned_block', postgresql.ENUM(name='hostelblock', create_type=False), nullable=True),
        sa.Column('salary', sa.DECIMAL(12, 2), nullable=False, server_default='0'),
        sa.Column('payment_status', sa.Enum('PAID', 'PENDING', name='paymentstatus'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_hostel_staff_role', 'hostel_staff', ['role'])

    # 15. Default admin account (username: admin)
    print("   Creating Admin user (username: admin)...")
    password_hash = pwd_context.hash("Admin@123", rounds=12)
    conn.execute(text("""
        INSERT INTO users (name, username, password_hash, role, is_active, reminder_lead_days, created_at, updated_at)
        VALUES ('System Administrator', 'admin', :password_hash, 'ADMIN', true, 1, :now, :now)
    """), {"password_hash": password_hash, "now": now})

    print("✅ Initial schema created")


def downgrade() -> None:
    """Drop all tables and enum types."""
    # Drop in reverse order to respect foreign keys
    op.drop_table('hostel_staff')
    op.drop_table('hostel_residents')
    op.drop_table('hostel_rooms')
    op.drop_table('staff_attendance')
    op.drop_table('student_attendance')
    op.drop_table('staff')
    op.drop_table('transfer_certificates')
    op.drop_table('notifications')
    op.drop_table('event_announcements')
    op.drop_table('calendar_events')
    op.drop_table('school_settings')
    op.drop_table('exam_results')
    op.drop_table('students')
    op.drop_table('users')

    for enum_name in (
        'paymentstatus', 'hostelstaffrole', 'roomtype', 'hostelblock',
        'staffattendancestatus', 'attendancestatus',
        'employmentstatus', 'employeetype', 'designation', 'department',
        'qualification', 'bloodgroup', 'maritalstatus', 'stafftype',
        'calendareventtype', 'studentstatus', 'category', 'gender', 'grade', 'userrole',
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
