"""
Seed data script for the School Journal system.
Creates sample data for testing and demonstration.
"""
import logging
import random
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from database import (
    get_db_context, init_db,
    User, SchoolClass, Subject, StudentClass, Subgroup, StudentSubgroup,
    Schedule, Assignment, Grade, AcademicPeriodBoundary,
)

logger = logging.getLogger(__name__)

LESSON_TIMES = [("08:30", "09:15"), ("09:25", "10:10"), ("10:30", "11:15")]


def clear_database(db: Session) -> None:
    """Delete every row, children first."""
    for model in (
        Grade, Assignment, Schedule, StudentSubgroup, Subgroup, StudentClass,
        AcademicPeriodBoundary, SchoolClass, Subject, User,
    ):
        db.query(model).delete()


def seed_database(today: date = None) -> dict:
    """
    Populate database with sample data.

    Two classes: 7A grades on the five-point scale, 9B on cumulative points
    with an English subgroup. Returns the counts of created rows.
    """
    today = today or date.today()
    rng = random.Random(7)

    with get_db_context() as db:
        clear_database(db)

        # Create Teachers
        teachers = [
            User(name="Olga Petrova", role="teacher"),
            User(name="Ivan Sokolov", role="teacher"),
        ]
        db.add_all(teachers)
        db.flush()

        # Create Students
        students = [
            User(name="Anna Smirnova", role="student"),
            User(name="Boris Ivanov", role="student"),
            User(name="Daria Kuznetsova", role="student"),
            User(name="Egor Popov", role="student"),
            User(name="Maria Volkova", role="student"),
            User(name="Nikita Lebedev", role="student"),
        ]
        db.add_all(students)
        db.flush()

        subjects = [Subject(name="Mathematics"), Subject(name="English"), Subject(name="History")]
        db.add_all(subjects)
        db.flush()

        five_point = SchoolClass(name="7A", grading_system="five_point")
        cumulative = SchoolClass(name="9B", grading_system="cumulative")
        db.add_all([five_point, cumulative])
        db.flush()

        # First 3 students in 7A, last 3 in 9B
        db.add_all(
            [StudentClass(student_id=s.id, class_id=five_point.id) for s in students[:3]]
            + [StudentClass(student_id=s.id, class_id=cumulative.id) for s in students[3:]]
        )

        english_group = Subgroup(class_id=cumulative.id, name="English group 1")
        db.add(english_group)
        db.flush()
        db.add_all([
            StudentSubgroup(student_id=students[3].id, subgroup_id=english_group.id),
            StudentSubgroup(student_id=students[4].id, subgroup_id=english_group.id),
        ])

        schedules = []
        for offset in range(10, 0, -2):
            day = today - timedelta(days=offset)
            for index, subject in enumerate(subjects):
                start, end = LESSON_TIMES[index]
                for school_class in (five_point, cumulative):
                    subgroup_id = (
                        english_group.id
                        if school_class is cumulative and subject is subjects[1]
                        else None
                    )
                    schedules.append(Schedule(
                        class_id=school_class.id,
                        subject_id=subject.id,
                        teacher_id=teachers[index % 2].id,
                        subgroup_id=subgroup_id,
                        schedule_date=day,
                        start_time=start,
                        end_time=end,
                        status="conducted",
                    ))
        db.add_all(schedules)
        db.flush()

        assignments = []
        for schedule in schedules:
            if schedule.class_id == cumulative.id:
                assignments.append(Assignment(
                    schedule_id=schedule.id,
                    subject_id=schedule.subject_id,
                    class_id=schedule.class_id,
                    teacher_id=schedule.teacher_id,
                    subgroup_id=schedule.subgroup_id,
                    assignment_type="classwork",
                    max_score=10,
                    planned_for=False,
                ))
        db.add_all(assignments)
        db.flush()
        assignment_by_schedule = {a.schedule_id: a for a in assignments}

        members = {students[3].id, students[4].id}
        grades = []
        for schedule in schedules:
            roster = students[:3] if schedule.class_id == five_point.id else students[3:]
            for student in roster:
                if schedule.subgroup_id is not None and student.id not in members:
                    continue
                assignment = assignment_by_schedule.get(schedule.id)
                if assignment is None:
                    value = rng.randint(2, 5)
                    grade_type = rng.choice(["classwork", "homework", "test"])
                else:
                    value = rng.randint(4, 10)
                    grade_type = "classwork"
                grades.append(Grade(
                    student_id=student.id,
                    subject_id=schedule.subject_id,
                    class_id=schedule.class_id,
                    teacher_id=schedule.teacher_id,
                    grade=value,
                    grade_type=grade_type,
                    schedule_id=schedule.id,
                    assignment_id=assignment.id if assignment else None,
                    subgroup_id=schedule.subgroup_id,
                    created_at=datetime.combine(schedule.schedule_date, datetime.min.time()),
                ))
        db.add_all(grades)

        counts = {
            "teachers": len(teachers),
            "students": len(students),
            "subjects": len(subjects),
            "classes": 2,
            "schedules": len(schedules),
            "assignments": len(assignments),
            "grades": len(grades),
        }

    logger.info("Database seeded: %s", counts)
    return counts


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    print(seed_database())
