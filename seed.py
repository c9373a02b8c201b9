# seed.py
from datetime import date

from app import create_app
from models import (
    db, Assessment, Country, LearningOutcome, School, SchoolClass, Strand, Student, Subject, Term, User,
)

CURRICULUM = {
    "Science": {
        "Forces and Interactions: Pushes and Pulls": [
            ("1.1.1", "Demonstrate that pushes can have different strengths and directions"),
            ("1.1.2", "Demonstrate that pulls can have different strengths and directions"),
            ("1.1.4", "Demonstrate that pushing on an object can start or stop it"),
        ],
        "Interdependent Relationships in Ecosystems": [
            ("2.1.1", "Understand the difference between living and non-living things"),
            ("2.2.2", "Understand that all living things need water"),
            ("2.2.3", "Understand plants need light to live and grow"),
        ],
        "Weather and Climate": [
            ("3.1.1", "Understand that sunlight can make a difference to things on the earth's surface"),
            ("3.3.4", "List the seasons there are in their country"),
        ],
    },
    "Mathematics": {
        "Number Sense": [
            ("1.1.1", "Count to 20 by ones"),
            ("1.1.2", "Recognise and write numerals 0 to 10"),
            ("1.2.1", "Compare two groups of objects using more, fewer and the same"),
        ],
        "Shape and Space": [
            ("2.1.1", "Name circles, squares, triangles and rectangles"),
            ("2.1.2", "Describe the position of objects using above, below, beside and between"),
        ],
    },
}

STUDENT_NAMES = [
    ("Amara", "Joseph"), ("Kevon", "Charles"), ("Shania", "Alexander"),
    ("Jaden", "Felix"), ("Mia", "Edmund"), ("Tariq", "Louis"),
]

# One rating per ASSESSMENT_DATES entry, per student; None = not assessed that day
PATTERNS = [
    ("EASILY_MEETING", "MEETING", "EASILY_MEETING"),
    ("MEETING", "MEETING", None),
    ("NEEDS_PRACTICE", "NEEDS_PRACTICE", "MEETING"),
    ("MEETING", "EASILY_MEETING", "EASILY_MEETING"),
    ("NEEDS_PRACTICE", None, "NEEDS_PRACTICE"),
    (None, "MEETING", "MEETING"),
]
ASSESSMENT_DATES = (date(2024, 9, 20), date(2024, 10, 18), date(2024, 11, 22))


def seed_curriculum():
    outcomes = []
    for s_order, (subject_name, strands) in enumerate(CURRICULUM.items(), start=1):
        subject = Subject(name=subject_name, display_order=s_order)
        db.session.add(subject)
        for st_order, (strand_name, items) in enumerate(strands.items(), start=1):
            strand = Strand(subject=subject, name=strand_name, display_order=st_order)
            db.session.add(strand)
            for o_order, (code, description) in enumerate(items, start=1):
                outcome = LearningOutcome(
                    subject=subject, strand=strand, code=code, description=description, display_order=o_order
                )
                db.session.add(outcome)
                outcomes.append(outcome)
    db.session.flush()
    return outcomes


def seed():
    app = create_app()
    with app.app_context():
        db.drop_all()
        db.create_all()

        country = Country(name="Saint Lucia")
        school = School(name="Castries Primary School", country=country)
        db.session.add_all([country, school])
        db.session.flush()

        admin = User(email="admin@castriesprimary.edu.lc", first_name="School", last_name="Admin",
                     role="SCHOOL_ADMIN", school_id=school.id, country_id=country.id)
        teacher = User(email="teacher@castriesprimary.edu.lc", first_name="Grace", last_name="Mathurin",
                       role="TEACHER", school_id=school.id, country_id=country.id)
        db.session.add_all([admin, teacher])
        db.session.flush()

        klass = SchoolClass(school_id=school.id, name="K1 Butterflies", academic_year="2024/25",
                            teacher_id=teacher.id)
        term = Term(school_id=school.id, name="Term 1", school_year="2024/25",
                    start_date=date(2024, 9, 1), end_date=date(2024, 12, 20))
        db.session.add_all([klass, term])
        db.session.flush()

        outcomes = seed_curriculum()

        students = []
        for i, (first, last) in enumerate(STUDENT_NAMES, start=1):
            students.append(Student(school_id=school.id, class_id=klass.id, first_name=first,
                                    last_name=last, student_id_number=f"CPS-{i:03d}"))
        db.session.add_all(students)
        db.session.flush()

        # Each student gets one round per date on the first few outcomes
        count = 0
        for student, pattern in zip(students, PATTERNS):
            for outcome in outcomes[:4]:
                for day, rating in zip(ASSESSMENT_DATES, pattern):
                    if rating is None:
                        continue
                    db.session.add(Assessment(student_id=student.id, learning_outcome_id=outcome.id,
                                              term_id=term.id, assessment_date=day, rating=rating,
                                              teacher_id=teacher.id))
                    count += 1
        db.session.commit()

        print(f"Seeded: 1 school, 1 class, {len(students)} students, {len(outcomes)} outcomes, "
              f"{count} assessments.")


if __name__ == "__main__":
    seed()
