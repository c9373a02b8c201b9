# app.py
import logging
import re

from flask import Flask, request, jsonify, abort, send_file
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import ImmutableMultiDict
from werkzeug.exceptions import HTTPException

import analytics
import exports
import records
import reports
from config import Config
from forms import AssessmentForm, AssessmentUpdateForm
from models import (
    db, School, User, Subject, Strand, LearningOutcome,
    SchoolClass, Student, Term, Assessment
)

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(key):
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    # ---- DB setup
    db.init_app(app)
    Migrate(app, db)

    # ---- Helpers
    def parse_int_arg(name, required=False):
        raw = (request.args.get(name) or "").strip()
        if raw in ("", "all"):
            if required:
                abort(400, description=f"{name} is required")
            return None
        try:
            return int(raw)
        except ValueError:
            abort(400, description=f"{name} must be an integer")

    def json_formdata():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            abort(400, description="Expected a JSON object")
        # WTForms expects strings; null clears a field. camelCase keys (the
        # shape every response uses) map onto the snake_case form fields.
        return ImmutableMultiDict({
            _snake_case(k): ("" if v is None else str(v))
            for k, v in data.items()
            if not isinstance(v, (dict, list))
        })

    def commit():
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("database commit failed")
            raise

    def load_curriculum():
        return records.Curriculum(
            subjects=[s.to_record() for s in Subject.query.all()],
            strands=[s.to_record() for s in Strand.query.all()],
            outcomes=[o.to_record() for o in LearningOutcome.query.all()],
        )

    def load_term(term_id):
        if term_id is None:
            return None
        return db.get_or_404(Term, term_id)

    def assessments_for(student_ids, term_id=None, outcome_ids=None):
        if not student_ids:
            return []
        q = Assessment.query.filter(Assessment.student_id.in_(student_ids))
        if term_id is not None:
            q = q.filter(Assessment.term_id == term_id)
        if outcome_ids is not None:
            q = q.filter(Assessment.learning_outcome_id.in_(outcome_ids))
        return [a.to_record() for a in q.all()]

    def class_students(class_id):
        return [s.to_record() for s in Student.query.filter_by(class_id=class_id).all()]

    def teacher_records(*classes):
        ids = {c.teacher_id for c in classes if c.teacher_id}
        if not ids:
            return []
        return [u.to_record() for u in User.query.filter(User.id.in_(ids)).all()]

    # ---- Report builders (shared by the JSON and export routes)

    def build_student_report(student_id, term_id):
        student = db.get_or_404(Student, student_id)
        load_term(term_id)
        school = db.session.get(School, student.school_id)
        return reports.student_report(
            student.id,
            students=[student.to_record()],
            assessments=assessments_for([student.id], term_id),
            curriculum=load_curriculum(),
            classes=[student.klass.to_record()] if student.klass else [],
            schools=[school.to_record()] if school else [],
            term_id=term_id,
        )

    def build_student_subject_report(student_id, subject_id, term_id):
        student = db.get_or_404(Student, student_id)
        db.get_or_404(Subject, subject_id)
        term = load_term(term_id)
        school = db.session.get(School, student.school_id)
        return reports.student_subject_report(
            student.id,
            subject_id,
            students=[student.to_record()],
            assessments=assessments_for([student.id], term_id),
            curriculum=load_curriculum(),
            classes=[student.klass.to_record()] if student.klass else [],
            schools=[school.to_record()] if school else [],
            term=term.to_record() if term else None,
        )

    def build_strand_report(strand_id, class_id, term_id):
        strand = db.get_or_404(Strand, strand_id)
        klass = db.get_or_404(SchoolClass, class_id)
        load_term(term_id)
        students = class_students(klass.id)
        outcome_ids = [o.id for o in strand.outcomes]
        return reports.strand_report(
            strand.id,
            klass.id,
            students=students,
            assessments=assessments_for([s.id for s in students], term_id, outcome_ids),
            curriculum=load_curriculum(),
            classes=[klass.to_record()],
            term_id=term_id,
        )

    def build_outcome_report(outcome_id, class_id, term_id):
        outcome = db.get_or_404(LearningOutcome, outcome_id)
        klass = db.get_or_404(SchoolClass, class_id)
        load_term(term_id)
        students = class_students(klass.id)
        rows = assessments_for([s.id for s in students], term_id, [outcome.id])
        teacher_ids = {a.teacher_id for a in rows if a.teacher_id}
        users = User.query.filter(User.id.in_(teacher_ids)).all() if teacher_ids else []
        terms = Term.query.filter(Term.id.in_({a.term_id for a in rows})).all() if rows else []
        return reports.outcome_report(
            outcome.id,
            klass.id,
            students=students,
            assessments=rows,
            curriculum=load_curriculum(),
            classes=[klass.to_record()],
            terms=[t.to_record() for t in terms],
            users=[u.to_record() for u in users],
            term_id=term_id,
        )

    def build_class_summary(class_id, term_id):
        klass = db.get_or_404(SchoolClass, class_id)
        load_term(term_id)
        students = class_students(klass.id)
        class_record = klass.to_record()
        return reports.class_summary(
            klass.id,
            students=students,
            assessments=assessments_for([s.id for s in students], term_id),
            curriculum=load_curriculum(),
            classes=[class_record],
            users=teacher_records(class_record),
            schools=[klass.school.to_record()],
            term_id=term_id,
            attention_threshold=app.config["ATTENTION_THRESHOLD"],
        )

    def build_school_summary(school_id, term_id):
        school = db.get_or_404(School, school_id)
        load_term(term_id)
        classes = [c.to_record() for c in SchoolClass.query.filter_by(school_id=school.id).all()]
        students = [s.to_record() for s in Student.query.filter_by(school_id=school.id, is_active=True).all()]
        countries = [school.country.to_record()] if school.country else []
        return reports.school_summary(
            school.id,
            schools=[school.to_record()],
            classes=classes,
            students=students,
            assessments=assessments_for([s.id for s in students], term_id),
            curriculum=load_curriculum(),
            users=teacher_records(*classes),
            countries=countries,
            term_id=term_id,
            attention_max_score=app.config["CLASS_ATTENTION_MAX_SCORE"],
            attention_limit=app.config["CLASS_ATTENTION_LIMIT"],
        )

    def build_report(report_type):
        """Rebuild a report from query args: id, class, subject, term."""
        term_id = parse_int_arg("term")
        obj_id = parse_int_arg("id", required=True)
        if report_type == "student":
            return build_student_report(obj_id, term_id)
        if report_type == "student-subject":
            return build_student_subject_report(obj_id, parse_int_arg("subject", required=True), term_id)
        if report_type == "strand":
            return build_strand_report(obj_id, parse_int_arg("class", required=True), term_id)
        if report_type == "outcome":
            return build_outcome_report(obj_id, parse_int_arg("class", required=True), term_id)
        if report_type == "class":
            return build_class_summary(obj_id, term_id)
        if report_type == "school":
            return build_school_summary(obj_id, term_id)
        abort(400, description="Invalid reportType")

    # ---- Errors

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"ok": False, "error": err.description}), err.code

    # ---- Reports

    @app.route("/api/reports/student/<int:student_id>")
    def api_student_report(student_id):
        data = build_student_report(student_id, parse_int_arg("term"))
        return jsonify({"ok": True, "data": data})

    @app.route("/api/reports/student/<int:student_id>/subject/<int:subject_id>")
    def api_student_subject_report(student_id, subject_id):
        data = build_student_subject_report(student_id, subject_id, parse_int_arg("term"))
        return jsonify({"ok": True, "data": data})

    @app.route("/api/reports/strand/<int:strand_id>")
    def api_strand_report(strand_id):
        class_id = parse_int_arg("class", required=True)
        data = build_strand_report(strand_id, class_id, parse_int_arg("term"))
        return jsonify({"ok": True, "data": data})

    @app.route("/api/reports/outcome/<int:outcome_id>")
    def api_outcome_report(outcome_id):
        class_id = parse_int_arg("class", required=True)
        data = build_outcome_report(outcome_id, class_id, parse_int_arg("term"))
        return jsonify({"ok": True, "data": data})

    @app.route("/api/reports/class/<int:class_id>")
    def api_class_summary(class_id):
        data = build_class_summary(class_id, parse_int_arg("term"))
        return jsonify({"ok": True, "data": data})

    @app.route("/api/reports/school/<int:school_id>")
    def api_school_summary(school_id):
        data = build_school_summary(school_id, parse_int_arg("term"))
        return jsonify({"ok": True, "data": data})

    @app.route("/api/reports/<report_type>/export")
    def api_report_export(report_type):
        if report_type not in exports.REPORT_TYPES:
            abort(400, description="Invalid reportType")
        fmt = (request.args.get("format") or "csv").strip().lower()
        if fmt not in exports.FORMATS:
            abort(400, description=f"format must be one of {', '.join(exports.FORMATS)}")

        report = build_report(report_type)
        try:
            payload, mimetype, filename = exports.export(report, report_type, fmt)
        except exports.ExportError as exc:
            abort(400, description=str(exc))
        logger.info("exported %s report as %s", report_type, fmt)
        return send_file(payload, as_attachment=True, download_name=filename, mimetype=mimetype)

    # ---- Analytics

    @app.route("/api/analytics/class/<int:class_id>")
    def api_class_analytics(class_id):
        klass = db.get_or_404(SchoolClass, class_id)
        term_id = parse_int_arg("term")
        load_term(term_id)
        grouping = (request.args.get("group_by") or app.config["DEFAULT_TREND_GROUPING"]).strip().lower()
        if grouping not in app.config["TREND_GROUPINGS"]:
            abort(400, description=f"group_by must be one of {', '.join(app.config['TREND_GROUPINGS'])}")

        students = [s for s in class_students(klass.id) if s.is_active]
        rows = assessments_for([s.id for s in students], term_id)
        curriculum = load_curriculum()

        data = reports.class_statistics(
            rows, students, curriculum.outcomes,
            subjects=curriculum.subjects,
            attention_threshold=app.config["ATTENTION_THRESHOLD"],
        )
        data["progressBySubject"] = analytics.progress_by_subject(
            rows, curriculum.outcomes, students, curriculum.subjects
        )
        data["trend"] = analytics.trend_data(rows, grouping)
        return jsonify({"ok": True, "data": data})

    @app.route("/api/students/<int:student_id>/outcomes/<int:outcome_id>/trend")
    def api_outcome_trend(student_id, outcome_id):
        db.get_or_404(Student, student_id)
        db.get_or_404(LearningOutcome, outcome_id)
        rows = [a.to_record() for a in
                Assessment.query.filter_by(student_id=student_id, learning_outcome_id=outcome_id).all()]
        latest = analytics.latest_assessment(rows)
        return jsonify({"ok": True, "data": {
            "studentId": student_id,
            "learningOutcomeId": outcome_id,
            "trend": analytics.progress_trend(rows),
            "assessmentCount": len(rows),
            "latestRating": latest.rating if latest else None,
            "latestDate": analytics.iso_date(latest.assessment_date) if latest else None,
        }})

    # ---- Assessments (write path)

    @app.route("/api/assessments", methods=["POST"])
    def api_assessment_create():
        form = AssessmentForm(formdata=json_formdata())
        if not form.validate():
            logger.warning("assessment rejected: %s", form.errors)
            return jsonify({"ok": False, "error": "Invalid assessment", "errors": form.errors}), 400

        a = Assessment()
        form.populate(a)
        db.session.add(a)
        commit()
        logger.info("assessment %s created: student=%s outcome=%s rating=%s",
                    a.id, a.student_id, a.learning_outcome_id, a.rating)
        return jsonify({"ok": True, "data": a.to_dict()}), 201

    @app.route("/api/assessments/<int:assessment_id>", methods=["PATCH"])
    def api_assessment_update(assessment_id):
        a = db.get_or_404(Assessment, assessment_id)
        form = AssessmentUpdateForm(a, formdata=json_formdata())
        if not form.has_changes():
            return jsonify({"ok": False, "error": "Nothing to update: send rating, comment or assessmentDate"}), 400
        if not form.validate():
            logger.warning("assessment %s update rejected: %s", a.id, form.errors)
            return jsonify({"ok": False, "error": "Invalid assessment", "errors": form.errors}), 400

        form.apply(a)
        commit()
        logger.info("assessment %s updated", a.id)
        return jsonify({"ok": True, "data": a.to_dict()})

    @app.route("/api/assessments/<int:assessment_id>", methods=["DELETE"])
    def api_assessment_delete(assessment_id):
        a = db.get_or_404(Assessment, assessment_id)
        db.session.delete(a)
        commit()
        logger.info("assessment %s deleted", assessment_id)
        return jsonify({"ok": True})

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
