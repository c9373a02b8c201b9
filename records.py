# records.py
"""
Plain, read-only records handed to the aggregation core.

The database layer converts its rows with ``Model.to_record()``; the report
code only ever sees these types and resolves relations through the lookup
helpers below instead of reaching through nested attributes.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional


# ----- Curriculum -----

@dataclass(frozen=True)
class Subject:
    id: int
    name: str
    display_order: int = 0


@dataclass(frozen=True)
class Strand:
    id: int
    name: str
    subject_id: int
    display_order: int = 0


@dataclass(frozen=True)
class LearningOutcome:
    id: int
    code: str
    description: str
    strand_id: int
    subject_id: int
    display_order: int = 0


# ----- Rosters -----

@dataclass(frozen=True)
class Country:
    id: int
    name: str


@dataclass(frozen=True)
class School:
    id: int
    name: str
    country_id: Optional[int] = None


@dataclass(frozen=True)
class Student:
    id: int
    first_name: str
    last_name: str
    student_id_number: str = ""
    school_id: Optional[int] = None
    class_id: Optional[int] = None
    date_of_birth: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class SchoolClass:
    id: int
    name: str
    grade_level: str = ""
    academic_year: str = ""
    school_id: Optional[int] = None
    teacher_id: Optional[int] = None


@dataclass(frozen=True)
class Term:
    id: int
    name: str
    school_year: str
    start_date: date
    end_date: date
    school_id: Optional[int] = None


@dataclass(frozen=True)
class User:
    id: int
    role: str
    first_name: str = ""
    last_name: str = ""
    school_id: Optional[int] = None
    country_id: Optional[int] = None


# ----- Assessments -----

@dataclass(frozen=True)
class Assessment:
    id: int
    student_id: int
    learning_outcome_id: int
    term_id: int
    assessment_date: date
    rating: str
    comment: Optional[str] = None
    teacher_id: Optional[int] = None


# ----- Lookups / joins -----

def index_by_id(items):
    return {item.id: item for item in items}


def full_name(person) -> str:
    if person is None:
        return ""
    return f"{person.first_name} {person.last_name}".strip()


def by_display_order(items):
    return sorted(items, key=lambda x: (x.display_order, x.id))


@dataclass(frozen=True)
class Curriculum:
    """Subjects, strands and outcomes with explicit joins between them."""

    subjects: tuple = ()
    strands: tuple = ()
    outcomes: tuple = ()
    _subjects: dict = field(init=False, repr=False, compare=False)
    _strands: dict = field(init=False, repr=False, compare=False)
    _outcomes: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # frozen dataclass: normalise inputs and build the id indexes once
        object.__setattr__(self, "subjects", tuple(self.subjects))
        object.__setattr__(self, "strands", tuple(self.strands))
        object.__setattr__(self, "outcomes", tuple(self.outcomes))
        object.__setattr__(self, "_subjects", index_by_id(self.subjects))
        object.__setattr__(self, "_strands", index_by_id(self.strands))
        object.__setattr__(self, "_outcomes", index_by_id(self.outcomes))

    def subject(self, subject_id):
        return self._subjects.get(subject_id)

    def strand(self, strand_id):
        return self._strands.get(strand_id)

    def outcome(self, outcome_id):
        return self._outcomes.get(outcome_id)

    def strands_for(self, subject_id):
        return by_display_order(s for s in self.strands if s.subject_id == subject_id)

    def outcomes_for_strand(self, strand_id):
        return by_display_order(o for o in self.outcomes if o.strand_id == strand_id)

    def outcomes_for_subject(self, subject_id):
        return by_display_order(o for o in self.outcomes if o.subject_id == subject_id)

    def subject_name(self, subject_id, default="Unknown"):
        s = self.subject(subject_id)
        return s.name if s else default

    def strand_name(self, strand_id, default="Unknown"):
        s = self.strand(strand_id)
        return s.name if s else default
