# models.py
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

import records

db = SQLAlchemy()

ROLES = ("SUPERUSER", "SCHOOL_ADMIN", "COUNTRY_ADMIN", "TEACHER")


# ----- Organisation -----

class Country(db.Model):
    __tablename__ = "countries"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)

    schools = db.relationship("School", backref="country")

    def to_record(self):
        return records.Country(id=self.id, name=self.name)


class School(db.Model):
    __tablename__ = "schools"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(160), nullable=False)
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), nullable=True, index=True)

    classes = db.relationship("SchoolClass", backref="school", cascade="all, delete-orphan")
    terms = db.relationship("Term", backref="school", cascade="all, delete-orphan")

    def to_record(self):
        return records.School(id=self.id, name=self.name, country_id=self.country_id)


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(160), unique=True, nullable=False)
    first_name = db.Column(db.String(80), nullable=False, default="")
    last_name = db.Column(db.String(80), nullable=False, default="")
    role = db.Column(db.String(20), nullable=False, default="TEACHER")  # see ROLES
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=True, index=True)
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_record(self):
        return records.User(
            id=self.id,
            role=self.role,
            first_name=self.first_name,
            last_name=self.last_name,
            school_id=self.school_id,
            country_id=self.country_id,
        )


# ----- Curriculum (seeded reference data) -----

class Subject(db.Model):
    __tablename__ = "subjects"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    strands = db.relationship("Strand", backref="subject", order_by="Strand.display_order",
                              cascade="all, delete-orphan")

    def to_record(self):
        return records.Subject(id=self.id, name=self.name, display_order=self.display_order)


class Strand(db.Model):
    __tablename__ = "strands"
    id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.id"), nullable=False, index=True)
    name = db.Column(db.String(160), nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    outcomes = db.relationship("LearningOutcome", backref="strand",
                               order_by="LearningOutcome.display_order",
                               cascade="all, delete-orphan")

    def to_record(self):
        return records.Strand(
            id=self.id, name=self.name, subject_id=self.subject_id, display_order=self.display_order
        )


class LearningOutcome(db.Model):
    __tablename__ = "learning_outcomes"
    id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.id"), nullable=False, index=True)
    strand_id = db.Column(db.Integer, db.ForeignKey("strands.id"), nullable=False, index=True)
    code = db.Column(db.String(20), nullable=False)  # e.g. "2.3.1"
    description = db.Column(db.Text, nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    subject = db.relationship("Subject")

    __table_args__ = (
        db.UniqueConstraint("subject_id", "code", name="uq_outcome_subject_code"),
    )

    def to_record(self):
        return records.LearningOutcome(
            id=self.id,
            code=self.code,
            description=self.description,
            strand_id=self.strand_id,
            subject_id=self.subject_id,
            display_order=self.display_order,
        )


# ----- Classes, students, terms -----

class SchoolClass(db.Model):
    __tablename__ = "classes"
    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False, index=True)
    name = db.Column(db.String(80), nullable=False)
    grade_level = db.Column(db.String(30), nullable=False, default="KINDERGARTEN")
    academic_year = db.Column(db.String(9), nullable=False)  # "2024/25"
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    students = db.relationship("Student", backref="klass")
    teacher = db.relationship("User")

    def to_record(self):
        return records.SchoolClass(
            id=self.id,
            name=self.name,
            grade_level=self.grade_level,
            academic_year=self.academic_year,
            school_id=self.school_id,
            teacher_id=self.teacher_id,
        )


class Student(db.Model):
    __tablename__ = "students"
    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False, index=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=True, index=True)  # null = unassigned
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False, index=True)
    student_id_number = db.Column(db.String(40), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assessments = db.relationship("Assessment", backref="student", cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("school_id", "student_id_number", name="uq_student_number_per_school"),
    )

    def to_record(self):
        return records.Student(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            student_id_number=self.student_id_number,
            school_id=self.school_id,
            class_id=self.class_id,
            date_of_birth=self.date_of_birth,
            is_active=self.is_active,
        )


class Term(db.Model):
    __tablename__ = "terms"
    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False, index=True)
    name = db.Column(db.String(40), nullable=False)  # "Term 1"
    school_year = db.Column(db.String(9), nullable=False)  # "2024/25"
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("school_id", "school_year", "name", name="uq_term_school_year_name"),
    )

    def contains(self, day) -> bool:
        return self.start_date <= day <= self.end_date

    def to_record(self):
        return records.Term(
            id=self.id,
            name=self.name,
            school_year=self.school_year,
            start_date=self.start_date,
            end_date=self.end_date,
            school_id=self.school_id,
        )


# ----- Assessments -----

class Assessment(db.Model):
    __tablename__ = "assessments"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False)
    learning_outcome_id = db.Column(db.Integer, db.ForeignKey("learning_outcomes.id"), nullable=False, index=True)
    term_id = db.Column(db.Integer, db.ForeignKey("terms.id"), nullable=False, index=True)
    assessment_date = db.Column(db.Date, nullable=False)
    rating = db.Column(db.String(20), nullable=False)  # EASILY_MEETING | MEETING | NEEDS_PRACTICE
    comment = db.Column(db.Text, nullable=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    learning_outcome = db.relationship("LearningOutcome")
    term = db.relationship("Term")
    teacher = db.relationship("User")

    __table_args__ = (
        db.Index("ix_assessment_student_outcome_date", "student_id", "learning_outcome_id", "assessment_date"),
    )

    def to_record(self):
        return records.Assessment(
            id=self.id,
            student_id=self.student_id,
            learning_outcome_id=self.learning_outcome_id,
            term_id=self.term_id,
            assessment_date=self.assessment_date,
            rating=self.rating,
            comment=self.comment,
            teacher_id=self.teacher_id,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "learningOutcomeId": self.learning_outcome_id,
            "termId": self.term_id,
            "assessmentDate": self.assessment_date.isoformat() if self.assessment_date else None,
            "rating": self.rating,
            "comment": self.comment,
            "teacherId": self.teacher_id,
        }
