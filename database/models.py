"""
Database models for the School Journal system.
Defines all SQLAlchemy models for classes, lessons, assignments and grades.
"""
from sqlalchemy import (
    Boolean, Column, Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func

from performance.entities import GradingSystem, ScheduleStatus

Base = declarative_base()


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    """
    Users table - stores students and teachers.

    Attributes:
        id: Unique identifier
        name: User's full name
        role: Either 'student' or 'teacher'
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    role = Column(Enum("student", "teacher", name="user_role"), nullable=False)

    # Relationships
    classes = relationship("StudentClass", back_populates="student", cascade="all, delete-orphan")
    subgroups = relationship("StudentSubgroup", back_populates="student", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"


class SchoolClass(Base):
    """
    Classes table.

    Attributes:
        id: Unique identifier
        name: Class name (e.g., "7A")
        grading_system: 'five_point' or 'cumulative'
    """
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    grading_system = Column(
        Enum(*_enum_values(GradingSystem), name="grading_system"),
        nullable=False,
        default=GradingSystem.FIVE_POINT.value,
    )

    # Relationships
    students = relationship("StudentClass", back_populates="school_class", cascade="all, delete-orphan")
    subgroups = relationship("Subgroup", back_populates="school_class", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<SchoolClass(id={self.id}, name='{self.name}', grading_system='{self.grading_system}')>"


class Subject(Base):
    """Subjects table."""
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<Subject(id={self.id}, name='{self.name}')>"


class StudentClass(Base):
    """Association table linking students to their classes."""
    __tablename__ = "student_classes"

    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)

    # Relationships
    student = relationship("User", back_populates="classes")
    school_class = relationship("SchoolClass", back_populates="students")

    def __repr__(self):
        return f"<StudentClass(student_id={self.student_id}, class_id={self.class_id})>"


class Subgroup(Base):
    """
    A named subset of a class's students.
    Tied to a subject only through the lessons that reference it.
    """
    __tablename__ = "subgroups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)

    # Relationships
    school_class = relationship("SchoolClass", back_populates="subgroups")
    members = relationship("StudentSubgroup", back_populates="subgroup", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Subgroup(id={self.id}, class_id={self.class_id}, name='{self.name}')>"


class StudentSubgroup(Base):
    """Subgroup membership."""
    __tablename__ = "student_subgroups"

    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    subgroup_id = Column(Integer, ForeignKey("subgroups.id", ondelete="CASCADE"), primary_key=True)

    # Relationships
    student = relationship("User", back_populates="subgroups")
    subgroup = relationship("Subgroup", back_populates="members")

    def __repr__(self):
        return f"<StudentSubgroup(student_id={self.student_id}, subgroup_id={self.subgroup_id})>"


class Schedule(Base):
    """
    Schedules table - one lesson occurrence.

    Attributes:
        subgroup_id: Set for subgroup-only lessons, NULL for whole-class lessons
        start_time / end_time: "HH:MM" strings
        status: 'not_conducted' or 'conducted'
    """
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    subgroup_id = Column(Integer, ForeignKey("subgroups.id", ondelete="SET NULL"), nullable=True)
    schedule_date = Column(Date, nullable=True)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    status = Column(
        Enum(*_enum_values(ScheduleStatus), name="schedule_status"),
        nullable=False,
        default=ScheduleStatus.NOT_CONDUCTED.value,
    )

    assignments = relationship("Assignment", back_populates="schedule", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Schedule(id={self.id}, subject_id={self.subject_id}, date={self.schedule_date}, status='{self.status}')>"


class Assignment(Base):
    """
    Assignments table (cumulative grading only).

    Attributes:
        max_score: Points available, > 0
        planned_for: Created ahead of the lesson; grades count once conducted
    """
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    subgroup_id = Column(Integer, ForeignKey("subgroups.id", ondelete="SET NULL"), nullable=True)
    assignment_type = Column(String(50), nullable=False, default="classwork")
    max_score = Column(Float, nullable=False)
    planned_for = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)

    schedule = relationship("Schedule", back_populates="assignments")

    def __repr__(self):
        return f"<Assignment(id={self.id}, schedule_id={self.schedule_id}, max_score={self.max_score})>"


class Grade(Base):
    """
    Grades table.

    schedule_id, assignment_id and subgroup_id are independently nullable.
    Uniqueness of (student, assignment) for conducted lessons is enforced by
    the write service, not by a constraint.
    """
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    grade = Column(Float, nullable=False)
    grade_type = Column(String(50), nullable=False, default="classwork")
    comment = Column(Text, nullable=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True)
    subgroup_id = Column(Integer, ForeignKey("subgroups.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    def __repr__(self):
        return f"<Grade(id={self.id}, student_id={self.student_id}, subject_id={self.subject_id}, grade={self.grade})>"

    def to_dict(self):
        """Convert grade to dictionary for API responses."""
        return {
            "id": self.id,
            "student_id": self.student_id,
            "subject_id": self.subject_id,
            "class_id": self.class_id,
            "teacher_id": self.teacher_id,
            "grade": self.grade,
            "grade_type": self.grade_type,
            "comment": self.comment,
            "schedule_id": self.schedule_id,
            "assignment_id": self.assignment_id,
            "subgroup_id": self.subgroup_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class AcademicPeriodBoundary(Base):
    """Per-class override of an academic period's dates."""
    __tablename__ = "academic_period_boundaries"
    __table_args__ = (
        UniqueConstraint("class_id", "period_key", "academic_year", name="uq_class_period_year"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    period_key = Column(String(20), nullable=False)
    period_name = Column(String(100), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    academic_year = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<AcademicPeriodBoundary(class_id={self.class_id}, period_key='{self.period_key}')>"
