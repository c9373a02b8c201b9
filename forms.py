# forms.py
from flask import current_app
from flask_wtf import FlaskForm
from wtforms import DateField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional, ValidationError

from models import db, Assessment, LearningOutcome, Student, Term, User
from ratings import Rating


def _check_term_dates(term, day):
    if day is None or term is None:
        return
    if not current_app.config.get("ENFORCE_TERM_DATES", True):
        return
    if not term.contains(day):
        raise ValidationError(
            f"Assessment date must be within {term.name} "
            f"({term.start_date.isoformat()} to {term.end_date.isoformat()})."
        )


# --- Assessments (JSON API) ---

class AssessmentForm(FlaskForm):
    class Meta:
        csrf = False

    student_id = IntegerField("Student", validators=[DataRequired()])
    learning_outcome_id = IntegerField("Learning outcome", validators=[DataRequired()])
    term_id = IntegerField("Term", validators=[DataRequired()])
    assessment_date = DateField("Assessment date", validators=[DataRequired()])
    rating = SelectField("Rating", choices=Rating.choices(), validators=[DataRequired()])
    comment = TextAreaField("Comment", validators=[Optional(), Length(max=2000)])
    teacher_id = IntegerField("Teacher", validators=[Optional()])

    def validate_student_id(self, field):
        if not db.session.get(Student, field.data):
            raise ValidationError("Student not found.")

    def validate_learning_outcome_id(self, field):
        if not db.session.get(LearningOutcome, field.data):
            raise ValidationError("Learning outcome not found.")

    def validate_term_id(self, field):
        if not db.session.get(Term, field.data):
            raise ValidationError("Term not found.")

    def validate_teacher_id(self, field):
        if not db.session.get(User, field.data):
            raise ValidationError("Teacher not found.")

    def validate_assessment_date(self, field):
        term = db.session.get(Term, self.term_id.data) if self.term_id.data else None
        _check_term_dates(term, field.data)

    def populate(self, assessment: Assessment):
        assessment.student_id = self.student_id.data
        assessment.learning_outcome_id = self.learning_outcome_id.data
        assessment.term_id = self.term_id.data
        assessment.assessment_date = self.assessment_date.data
        assessment.rating = self.rating.data
        assessment.comment = (self.comment.data or "").strip() or None
        assessment.teacher_id = self.teacher_id.data


class AssessmentUpdateForm(FlaskForm):
    """Partial update: only rating, comment and date can change."""

    class Meta:
        csrf = False

    rating = StringField("Rating", validators=[Optional(), AnyOf(Rating.values())])
    comment = TextAreaField("Comment", validators=[Optional(), Length(max=2000)])
    assessment_date = DateField("Assessment date", validators=[Optional()])

    def __init__(self, assessment=None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.assessment = assessment

    def has_changes(self):
        return any(f.raw_data for f in (self.rating, self.comment, self.assessment_date))

    def validate_assessment_date(self, field):
        term = self.assessment.term if self.assessment is not None else None
        _check_term_dates(term, field.data)

    def apply(self, assessment: Assessment):
        if self.rating.data:
            assessment.rating = self.rating.data
        # an explicit null or blank comment clears it
        if self.comment.raw_data:
            assessment.comment = (self.comment.data or "").strip() or None
        if self.assessment_date.data is not None:
            assessment.assessment_date = self.assessment_date.data
