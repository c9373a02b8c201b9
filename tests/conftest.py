# tests/conftest.py
from datetime import date
from itertools import count

import pytest

import records
from app import create_app
from config import TestConfig
from models import (
    db, Assessment, Country, LearningOutcome, School, SchoolClass, Strand, Student, Subject, Term, User,
)


# ----- Record-level fixtures (pure core) -----

_ids = count(1000)


def make_assessment(student_id, outcome_id, day, rating, *, term_id=1, comment=None, id=None, teacher_id=None):
    if isinstance(day, str):
        day = date.fromisoformat(day)
    return records.Assessment(
        id=id if id is not None else next(_ids),
        student_id=student_id,
        learning_outcome_id=outcome_id,
        term_id=term_id,
        assessment_date=day,
        rating=rating,
        comment=comment,
        teacher_id=teacher_id,
    )


@pytest.fixture
def assess():
    return make_assessment


@pytest.fixture
def curriculum():
    subjects = [
        records.Subject(id=1, name="Science", display_order=1),
        records.Subject(id=2, name="Mathematics", display_order=2),
    ]
    strands = [
        records.Strand(id=10, name="Pushes and Pulls", subject_id=1, display_order=1),
        records.Strand(id=11, name="Weather and Climate", subject_id=1, display_order=2),
        records.Strand(id=20, name="Number Sense", subject_id=2, display_order=1),
    ]
    outcomes = [
        records.LearningOutcome(id=101, code="1.1.1", description="Pushes have strengths",
                                strand_id=10, subject_id=1, display_order=1),
        records.LearningOutcome(id=102, code="1.1.2", description="Pulls have strengths",
                                strand_id=10, subject_id=1, display_order=2),
        records.LearningOutcome(id=111, code="3.1.1", description="Sunlight warms the ground",
                                strand_id=11, subject_id=1, display_order=1),
        records.LearningOutcome(id=201, code="1.1.1", description="Count to 20",
                                strand_id=20, subject_id=2, display_order=1),
    ]
    return records.Curriculum(subjects=subjects, strands=strands, outcomes=outcomes)


@pytest.fixture
def roster():
    return [
        records.Student(id=1, first_name="Amara", last_name="Joseph", student_id_number="S-1",
                        school_id=1, class_id=5),
        records.Student(id=2, first_name="Kevon", last_name="Charles", student_id_number="S-2",
                        school_id=1, class_id=5),
        records.Student(id=3, first_name="Mia", last_name="Edmund", student_id_number="S-3",
                        school_id=1, class_id=5),
    ]


@pytest.fixture
def klass():
    return records.SchoolClass(id=5, name="K1 Butterflies", grade_level="KINDERGARTEN",
                               academic_year="2024/25", school_id=1, teacher_id=7)


# ----- Application fixtures -----

@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded(app):
    """A school with one class, two students, two subjects and one term."""
    country = Country(name="Saint Lucia")
    school = School(name="Castries Primary School", country=country)
    db.session.add_all([country, school])
    db.session.flush()

    teacher = User(email="teacher@example.org", first_name="Grace", last_name="Mathurin",
                   role="TEACHER", school_id=school.id)
    db.session.add(teacher)
    db.session.flush()

    klass = SchoolClass(school_id=school.id, name="K1 Butterflies", academic_year="2024/25",
                        teacher_id=teacher.id)
    term = Term(school_id=school.id, name="Term 1", school_year="2024/25",
                start_date=date(2024, 9, 1), end_date=date(2024, 12, 20))
    db.session.add_all([klass, term])
    db.session.flush()

    science = Subject(name="Science", display_order=1)
    maths = Subject(name="Mathematics", display_order=2)
    push = Strand(subject=science, name="Pushes and Pulls", display_order=1)
    number = Strand(subject=maths, name="Number Sense", display_order=1)
    o1 = LearningOutcome(subject=science, strand=push, code="1.1.1", description="Pushes", display_order=1)
    o2 = LearningOutcome(subject=science, strand=push, code="1.1.2", description="Pulls", display_order=2)
    o3 = LearningOutcome(subject=maths, strand=number, code="1.1.1", description="Count to 20", display_order=1)
    db.session.add_all([science, maths, push, number, o1, o2, o3])
    db.session.flush()

    amara = Student(school_id=school.id, class_id=klass.id, first_name="Amara", last_name="Joseph",
                    student_id_number="CPS-001")
    kevon = Student(school_id=school.id, class_id=klass.id, first_name="Kevon", last_name="Charles",
                    student_id_number="CPS-002")
    db.session.add_all([amara, kevon])
    db.session.flush()

    def add(student, outcome, day, rating, comment=None):
        a = Assessment(student_id=student.id, learning_outcome_id=outcome.id, term_id=term.id,
                       assessment_date=day, rating=rating, comment=comment, teacher_id=teacher.id)
        db.session.add(a)
        return a

    add(amara, o1, date(2024, 9, 20), "NEEDS_PRACTICE")
    add(amara, o1, date(2024, 10, 18), "EASILY_MEETING", "Much stronger now")
    add(amara, o2, date(2024, 10, 18), "MEETING")
    add(kevon, o1, date(2024, 9, 20), "NEEDS_PRACTICE")
    db.session.commit()

    # ids only; requests may close the session the instances belong to
    return {
        "school": school.id, "teacher": teacher.id, "class": klass.id, "term": term.id,
        "science": science.id, "maths": maths.id, "push": push.id, "number": number.id,
        "outcomes": [o1.id, o2.id, o3.id], "students": [amara.id, kevon.id],
    }
