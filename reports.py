# reports.py
"""
Report assemblers.

Each function turns a snapshot of records into the nested dict a report view
(or the export layer) renders. Keys are camelCase because the dicts go out
as JSON unchanged. When the referenced student/strand/outcome/class/school
is missing, the function returns the same shape with zeroed stats and empty
lists instead of raising.
"""
import logging

from analytics import (
    assessment_volume, average_score, chronological, classes_needing_attention, completion_rate,
    group_by, iso_date, latest_assessment, latest_by_pair, outcome_coverage, percent,
    performance_score, progress_trend, rating_distribution, score_assessments,
    students_needing_attention,
)
from records import by_display_order, full_name, index_by_id

logger = logging.getLogger(__name__)


# ----- Shared pieces -----

def _in_term(assessments, term_id):
    if term_id is None:
        return list(assessments)
    return [a for a in assessments if a.term_id == term_id]


def class_roster(students, class_id):
    """Active students of a class, by last then first name."""
    roster = [s for s in students if s.class_id == class_id and s.is_active]
    return sorted(roster, key=lambda s: (s.last_name.lower(), s.first_name.lower(), s.id))


def _person(student):
    return {"id": student.id, "firstName": student.first_name, "lastName": student.last_name}


def _class_view(klass, users=(), schools=()):
    if klass is None:
        return None
    teacher = index_by_id(users).get(klass.teacher_id)
    school = index_by_id(schools).get(klass.school_id)
    return {
        "id": klass.id,
        "name": klass.name,
        "gradeLevel": klass.grade_level,
        "academicYear": klass.academic_year,
        "teacher": full_name(teacher) or None,
        "school": school.name if school else None,
    }


def _student_header(student, classes=(), schools=()):
    klass = index_by_id(classes).get(student.class_id)
    school = index_by_id(schools).get(student.school_id)
    return {
        "id": student.id,
        "firstName": student.first_name,
        "lastName": student.last_name,
        "studentIdNumber": student.student_id_number,
        "school": school.name if school else None,
        "class": klass.name if klass else None,
        "gradeLevel": klass.grade_level if klass else None,
    }


def _stats(assessments, outcomes):
    """Distribution, score and outcome completion for one slice of assessments."""
    outcome_ids = {o.id for o in outcomes}
    assessed = {a.learning_outcome_id for a in assessments} & outcome_ids
    return {
        "totalAssessments": len(assessments),
        "totalOutcomes": len(outcome_ids),
        "assessedOutcomes": len(assessed),
        "completionRate": percent(len(assessed), len(outcome_ids)),
        "ratingDistribution": rating_distribution(assessments),
        "performanceScore": score_assessments(assessments),
        "averageScore": average_score(assessments),
    }


def _subject_id_of(curriculum, assessment):
    outcome = curriculum.outcome(assessment.learning_outcome_id)
    return outcome.subject_id if outcome else None


def _subject_summary(assessments, curriculum):
    by_subject = group_by(assessments, lambda a: _subject_id_of(curriculum, a))
    summary = []
    for subject in by_display_order(s for s in curriculum.subjects if s.id in by_subject):
        rows = by_subject[subject.id]
        summary.append({
            "subjectId": subject.id,
            "subjectName": subject.name,
            "totalAssessments": len(rows),
            "ratingDistribution": rating_distribution(rows),
            "performanceScore": score_assessments(rows),
        })
    return summary


# ----- By learner -----

def _outcome_row(outcome, history):
    latest = latest_assessment(history)
    return {
        "id": outcome.id,
        "code": outcome.code,
        "description": outcome.description,
        "latestRating": latest.rating if latest else None,
        "assessedAt": iso_date(latest.assessment_date) if latest else None,
        "comment": latest.comment if latest else None,
        "assessmentCount": len(history),
        "trend": progress_trend(history),
    }


def student_report(student_id, *, students, assessments, curriculum,
                   classes=(), schools=(), term_id=None):
    student = index_by_id(students).get(student_id)
    if student is None:
        logger.debug("student report: no student %s", student_id)
        return {
            "student": None,
            "termId": term_id,
            "overallStats": _stats([], curriculum.outcomes),
            "subjects": [],
        }

    own = [a for a in _in_term(assessments, term_id) if a.student_id == student_id]
    by_outcome = group_by(own, lambda a: a.learning_outcome_id)
    by_subject = group_by(own, lambda a: _subject_id_of(curriculum, a))

    subjects = []
    for subject in by_display_order(s for s in curriculum.subjects if s.id in by_subject):
        subject_rows = by_subject[subject.id]
        by_strand = group_by(subject_rows, lambda a: curriculum.outcome(a.learning_outcome_id).strand_id)

        strands = []
        for strand in curriculum.strands_for(subject.id):
            if strand.id not in by_strand:
                continue
            strand_outcomes = curriculum.outcomes_for_strand(strand.id)
            strands.append({
                "strandId": strand.id,
                "strandName": strand.name,
                "displayOrder": strand.display_order,
                **_stats(by_strand[strand.id], strand_outcomes),
                "outcomes": [_outcome_row(o, by_outcome.get(o.id, [])) for o in strand_outcomes],
            })

        subjects.append({
            "subjectId": subject.id,
            "subjectName": subject.name,
            "displayOrder": subject.display_order,
            **_stats(subject_rows, curriculum.outcomes_for_subject(subject.id)),
            "strands": strands,
        })

    return {
        "student": _student_header(student, classes, schools),
        "termId": term_id,
        "overallStats": _stats(own, curriculum.outcomes),
        "subjects": subjects,
    }


# ----- By strand (class matrix) -----

def strand_report(strand_id, class_id, *, students, assessments, curriculum,
                  classes, term_id=None):
    strand = curriculum.strand(strand_id)
    klass = index_by_id(classes).get(class_id)

    if strand is None or klass is None:
        logger.debug("strand report: strand %s / class %s not found", strand_id, class_id)
        return {
            "strand": None if strand is None else {
                "id": strand.id, "name": strand.name,
                "subjectName": curriculum.subject_name(strand.subject_id),
            },
            "class": _class_view(klass),
            "termId": term_id,
            "outcomes": [],
            "studentMatrix": [],
            "outcomeStats": [],
            "overallStats": {
                "totalStudents": 0,
                "totalOutcomes": 0,
                "totalAssessments": 0,
                "ratingDistribution": rating_distribution([]),
                "performanceScore": 0,
                "averageCompletion": 0,
            },
        }

    outcomes = curriculum.outcomes_for_strand(strand_id)
    outcome_ids = {o.id for o in outcomes}
    roster = class_roster(students, class_id)
    roster_ids = {s.id for s in roster}

    scoped = [
        a for a in _in_term(assessments, term_id)
        if a.learning_outcome_id in outcome_ids and a.student_id in roster_ids
    ]
    latest = latest_by_pair(scoped)
    by_student = group_by(scoped, lambda a: a.student_id)
    by_outcome = group_by(scoped, lambda a: a.learning_outcome_id)

    matrix = []
    for s in roster:
        cells = {}
        for o in outcomes:
            cell = latest.get((s.id, o.id))
            cells[o.id] = cell.rating if cell else None
        own = by_student.get(s.id, [])
        matrix.append({
            "student": _person(s),
            "outcomeRatings": cells,
            "ratingDistribution": rating_distribution(own),
            "performanceScore": score_assessments(own),
            "assessedCount": sum(1 for r in cells.values() if r is not None),
            "totalOutcomes": len(outcomes),
        })

    outcome_stats = []
    for o in outcomes:
        rows = by_outcome.get(o.id, [])
        outcome_stats.append({
            "outcome": {"id": o.id, "code": o.code, "description": o.description,
                        "displayOrder": o.display_order},
            "ratingDistribution": rating_distribution(rows),
            "performanceScore": score_assessments(rows),
            "assessedStudents": len({a.student_id for a in rows}),
        })

    # mean of the per-student completion percentages
    average_completion = percent(sum(row["assessedCount"] for row in matrix), len(outcomes) * len(matrix))

    return {
        "strand": {
            "id": strand.id,
            "name": strand.name,
            "subjectName": curriculum.subject_name(strand.subject_id),
        },
        "class": _class_view(klass),
        "termId": term_id,
        "outcomes": [
            {"id": o.id, "code": o.code, "description": o.description, "displayOrder": o.display_order}
            for o in outcomes
        ],
        "studentMatrix": matrix,
        "outcomeStats": outcome_stats,
        "overallStats": {
            "totalStudents": len(roster),
            "totalOutcomes": len(outcomes),
            "totalAssessments": len(scoped),
            "ratingDistribution": rating_distribution(scoped),
            "performanceScore": score_assessments(scoped),
            "averageCompletion": average_completion,
        },
    }


# ----- By outcome (SCO) -----

def outcome_report(outcome_id, class_id, *, students, assessments, curriculum,
                   classes, terms=(), users=(), term_id=None):
    outcome = curriculum.outcome(outcome_id)
    klass = index_by_id(classes).get(class_id)

    outcome_view = None
    if outcome is not None:
        outcome_view = {
            "id": outcome.id,
            "code": outcome.code,
            "description": outcome.description,
            "subjectName": curriculum.subject_name(outcome.subject_id),
            "strandName": curriculum.strand_name(outcome.strand_id),
        }

    if outcome is None or klass is None:
        logger.debug("outcome report: outcome %s / class %s not found", outcome_id, class_id)
        return {
            "outcome": outcome_view,
            "class": _class_view(klass),
            "termId": term_id,
            "studentResults": [],
            "overallStats": {
                "totalStudents": 0,
                "assessedStudents": 0,
                "notAssessed": 0,
                "ratingDistribution": rating_distribution([]),
                "performanceScore": 0,
            },
            "notAssessedStudents": [],
        }

    roster = class_roster(students, class_id)
    roster_ids = {s.id for s in roster}
    scoped = [
        a for a in _in_term(assessments, term_id)
        if a.learning_outcome_id == outcome_id and a.student_id in roster_ids
    ]
    by_student = group_by(scoped, lambda a: a.student_id)
    terms_by_id = index_by_id(terms)
    users_by_id = index_by_id(users)

    results = []
    latest_rows = []
    not_assessed = []
    for s in roster:
        history = chronological(by_student.get(s.id, []))
        latest = history[-1] if history else None
        if latest is None:
            not_assessed.append(_person(s))
        else:
            latest_rows.append(latest)

        entries = []
        for a in history:
            term = terms_by_id.get(a.term_id)
            entries.append({
                "rating": a.rating,
                "date": iso_date(a.assessment_date),
                "comment": a.comment,
                "term": term.name if term else None,
                "assessedBy": full_name(users_by_id.get(a.teacher_id)) or None,
            })

        results.append({
            "student": _person(s),
            "latestRating": latest.rating if latest else None,
            "latestDate": iso_date(latest.assessment_date) if latest else None,
            "latestComment": latest.comment if latest else None,
            "assessmentCount": len(history),
            "trend": progress_trend(history),
            "history": entries,
        })

    return {
        "outcome": outcome_view,
        "class": _class_view(klass),
        "termId": term_id,
        "studentResults": results,
        "overallStats": {
            "totalStudents": len(roster),
            "assessedStudents": len(latest_rows),
            "notAssessed": len(not_assessed),
            "ratingDistribution": rating_distribution(latest_rows),
            "performanceScore": score_assessments(latest_rows),
        },
        "notAssessedStudents": not_assessed,
    }


# ----- Student x subject (PDF layout) -----

def _term_view(term):
    if term is None:
        return None
    return {
        "name": term.name,
        "schoolYear": term.school_year,
        "startDate": iso_date(term.start_date),
        "endDate": iso_date(term.end_date),
    }


def student_subject_report(student_id, subject_id, *, students, assessments, curriculum,
                           classes=(), schools=(), term=None):
    """
    One learner, one subject: strands as sections, outcomes as rows and every
    distinct assessment date as a column. The PDF layout reads this shape
    key for key.
    """
    student = index_by_id(students).get(student_id)
    subject = curriculum.subject(subject_id)

    if student is None or subject is None:
        logger.debug("student/subject report: student %s / subject %s not found", student_id, subject_id)
        return {
            "student": _student_header(student, classes, schools) if student else None,
            "subject": {"id": subject.id, "name": subject.name} if subject else None,
            "term": _term_view(term),
            "assessmentDates": [],
            "strands": [],
            "summary": {
                "totalOutcomes": 0,
                "assessedOutcomes": 0,
                "completionRate": 0,
                "performanceScore": 0,
                "ratingDistribution": rating_distribution([]),
            },
        }

    subject_outcomes = curriculum.outcomes_for_subject(subject_id)
    outcome_ids = {o.id for o in subject_outcomes}
    rows = [
        a for a in _in_term(assessments, term.id if term else None)
        if a.student_id == student_id and a.learning_outcome_id in outcome_ids
    ]
    rows = chronological(rows)
    by_outcome = group_by(rows, lambda a: a.learning_outcome_id)

    strands = []
    for strand in curriculum.strands_for(subject_id):
        outcomes = []
        for o in curriculum.outcomes_for_strand(strand.id):
            cells = {}
            # later rows overwrite earlier ones on the same day
            for a in by_outcome.get(o.id, []):
                cells[iso_date(a.assessment_date)] = {"rating": a.rating, "comment": a.comment or ""}
            outcomes.append({
                "id": o.id,
                "code": o.code,
                "description": o.description,
                "assessmentsByDate": cells,
            })
        strands.append({"id": strand.id, "name": strand.name, "outcomes": outcomes})

    total_outcomes = sum(len(s["outcomes"]) for s in strands)
    assessed = len({a.learning_outcome_id for a in rows})
    distribution = rating_distribution(rows)

    return {
        "student": _student_header(student, classes, schools),
        "subject": {"id": subject.id, "name": subject.name},
        "term": _term_view(term),
        "assessmentDates": sorted({iso_date(a.assessment_date) for a in rows}),
        "strands": strands,
        "summary": {
            "totalOutcomes": total_outcomes,
            "assessedOutcomes": assessed,
            "completionRate": percent(assessed, total_outcomes),
            "performanceScore": performance_score(distribution, len(rows)),
            "ratingDistribution": distribution,
        },
    }


# ----- Class / school summaries -----

def class_summary(class_id, *, students, assessments, curriculum, classes,
                  users=(), schools=(), term_id=None, attention_threshold=50):
    klass = index_by_id(classes).get(class_id)
    if klass is None:
        logger.debug("class summary: no class %s", class_id)
        return {
            "class": None,
            "termId": term_id,
            "overallStats": {"studentCount": 0, **_stats([], curriculum.outcomes)},
            "studentStats": [],
            "subjectSummary": [],
            "studentsNeedingAttention": [],
        }

    roster = class_roster(students, class_id)
    roster_ids = {s.id for s in roster}
    scoped = [a for a in _in_term(assessments, term_id) if a.student_id in roster_ids]
    by_student = group_by(scoped, lambda a: a.student_id)

    student_stats = []
    for s in roster:
        own = by_student.get(s.id, [])
        stats = _stats(own, curriculum.outcomes)
        student_stats.append({
            "student": _person(s),
            "totalAssessments": stats["totalAssessments"],
            "assessedOutcomes": stats["assessedOutcomes"],
            "completionRate": stats["completionRate"],
            "ratingDistribution": stats["ratingDistribution"],
            "performanceScore": stats["performanceScore"],
            "averageScore": stats["averageScore"],
        })

    return {
        "class": _class_view(klass, users, schools),
        "termId": term_id,
        "overallStats": {"studentCount": len(roster), **_stats(scoped, curriculum.outcomes)},
        "studentStats": student_stats,
        "subjectSummary": _subject_summary(scoped, curriculum),
        "studentsNeedingAttention": students_needing_attention(roster, scoped, attention_threshold),
    }


def school_summary(school_id, *, schools, classes, students, assessments, curriculum,
                   users=(), countries=(), term_id=None,
                   attention_max_score=60, attention_limit=5):
    school = index_by_id(schools).get(school_id)
    if school is None:
        logger.debug("school summary: no school %s", school_id)
        return {
            "school": None,
            "termId": term_id,
            "overallStats": {"classCount": 0, "studentCount": 0, **_stats([], curriculum.outcomes)},
            "classStats": [],
            "subjectSummary": [],
            "classesNeedingAttention": [],
        }

    country = index_by_id(countries).get(school.country_id)
    users_by_id = index_by_id(users)
    school_classes = [c for c in classes if c.school_id == school_id]
    roster = [s for s in students if s.school_id == school_id and s.is_active]
    roster_ids = {s.id for s in roster}
    scoped = [a for a in _in_term(assessments, term_id) if a.student_id in roster_ids]
    by_student = group_by(scoped, lambda a: a.student_id)

    class_stats = []
    for c in school_classes:
        members = [s for s in roster if s.class_id == c.id]
        rows = [a for s in members for a in by_student.get(s.id, [])]
        stats = _stats(rows, curriculum.outcomes)
        class_stats.append({
            "classId": c.id,
            "className": c.name,
            "gradeLevel": c.grade_level,
            "teacher": full_name(users_by_id.get(c.teacher_id)) or "Unassigned",
            "studentCount": len(members),
            "totalAssessments": stats["totalAssessments"],
            "assessedOutcomes": stats["assessedOutcomes"],
            "completionRate": stats["completionRate"],
            "ratingDistribution": stats["ratingDistribution"],
            "performanceScore": stats["performanceScore"],
        })

    return {
        "school": {"id": school.id, "name": school.name, "country": country.name if country else None},
        "termId": term_id,
        "overallStats": {
            "classCount": len(school_classes),
            "studentCount": len(roster),
            **_stats(scoped, curriculum.outcomes),
        },
        "classStats": class_stats,
        "subjectSummary": _subject_summary(scoped, curriculum),
        "classesNeedingAttention": classes_needing_attention(
            class_stats, max_score=attention_max_score, limit=attention_limit
        ),
    }


def class_statistics(assessments, students, outcomes, *, subjects=(), attention_threshold=50):
    """Dashboard numbers for one class: completion, coverage, distribution and who needs help."""
    assessments = list(assessments)
    students = list(students)
    outcomes = list(outcomes)
    distribution = rating_distribution(assessments)
    return {
        "studentCount": len(students),
        "outcomeCount": len(outcomes),
        "assessmentCount": len(assessments),
        "completionRate": completion_rate(assessments, outcomes, students),
        "assessmentVolume": assessment_volume(assessments, outcomes, students),
        "ratingDistribution": distribution,
        "coverage": outcome_coverage(assessments, outcomes, subjects),
        "studentsNeedingAttention": students_needing_attention(students, assessments, attention_threshold),
        "performancePercentage": performance_score(distribution, len(assessments)),
    }
