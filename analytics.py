# analytics.py
"""
Aggregation primitives over assessment records.

Everything here is a pure function over in-memory sequences of
``records.Assessment`` (or anything with the same attributes). Nothing reads
the database or the Flask app.
"""
import math
from collections import defaultdict
from datetime import date, datetime, timedelta

from ratings import MAX_SCORE, Rating, parse_rating, rating_score
from records import index_by_id

IMPROVING = "improving"
DECLINING = "declining"
STABLE = "stable"

TREND_GROUPINGS = ("day", "week", "month")


# ----- Small helpers -----

def round_half_up(value) -> int:
    return int(math.floor(value + 0.5))


def percent(part, whole) -> int:
    """part / whole as a whole percentage, rounded half up; 0 when whole is 0."""
    if not whole:
        return 0
    # scale before dividing so 29/200 lands on 14.5, not 14.4999...
    return round_half_up(part * 100 / whole)


def as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def iso_date(value):
    value = as_date(value)
    return value.isoformat() if isinstance(value, date) else value


def chronological(assessments):
    """Oldest first; rows on the same day keep creation (id) order."""
    return sorted(assessments, key=lambda a: (as_date(a.assessment_date), a.id))


def latest_assessment(assessments):
    ordered = chronological(assessments)
    return ordered[-1] if ordered else None


def latest_by_pair(assessments):
    """{(student_id, learning_outcome_id): latest assessment}"""
    latest = {}
    for a in chronological(assessments):
        latest[(a.student_id, a.learning_outcome_id)] = a
    return latest


def group_by(items, key):
    out = defaultdict(list)
    for item in items:
        out[key(item)].append(item)
    return out


def student_view(student):
    return {
        "id": student.id,
        "firstName": student.first_name,
        "lastName": student.last_name,
        "studentIdNumber": student.student_id_number,
        "classId": student.class_id,
    }


# ----- Distribution -----

def rating_distribution(assessments):
    dist = {r.value: 0 for r in Rating}
    for a in assessments:
        r = parse_rating(a.rating)
        if r is not None:
            dist[r.value] += 1
    return dist


# ----- Completion & coverage -----

def completion_rate(assessments, outcomes, students):
    """
    Share of the students x outcomes matrix that has been assessed at least once.

    Re-assessing the same pair does not count twice, so the percentage never
    exceeds 100. See assessment_volume() for the raw row count.
    """
    student_ids = {s.id for s in students}
    outcome_ids = {o.id for o in outcomes}
    if not student_ids or not outcome_ids:
        return {"total": 0, "completed": 0, "percentage": 0}

    total = len(student_ids) * len(outcome_ids)
    pairs = {
        (a.student_id, a.learning_outcome_id)
        for a in assessments
        if a.student_id in student_ids and a.learning_outcome_id in outcome_ids
    }
    return {"total": total, "completed": len(pairs), "percentage": percent(len(pairs), total)}


def assessment_volume(assessments, outcomes, students):
    """Raw assessment rows against the matrix size; can go above 100."""
    student_ids = {s.id for s in students}
    outcome_ids = {o.id for o in outcomes}
    if not student_ids or not outcome_ids:
        return {"total": 0, "assessments": 0, "percentage": 0}

    total = len(student_ids) * len(outcome_ids)
    rows = sum(1 for _ in assessments)
    return {"total": total, "assessments": rows, "percentage": percent(rows, total)}


def outcome_coverage(assessments, outcomes, subjects=()):
    outcomes = list(outcomes)
    if not outcomes:
        return {"total": 0, "covered": 0, "percentage": 0, "uncoveredOutcomes": []}

    assessed_ids = {a.learning_outcome_id for a in assessments}
    subjects_by_id = index_by_id(subjects)

    covered = 0
    uncovered = []
    for o in outcomes:
        if o.id in assessed_ids:
            covered += 1
            continue
        subject = subjects_by_id.get(o.subject_id)
        uncovered.append({
            "id": o.id,
            "code": o.code,
            "description": o.description,
            "subject": subject.name if subject else "Unknown",
        })

    return {
        "total": len(outcomes),
        "covered": covered,
        "percentage": percent(covered, len(outcomes)),
        "uncoveredOutcomes": uncovered,
    }


def progress_by_subject(assessments, outcomes, students, subjects=()):
    students = list(students)
    outcomes = list(outcomes)
    if not students or not outcomes:
        return []

    assessments = list(assessments)
    subjects_by_id = index_by_id(subjects)
    outcomes_by_subject = group_by(outcomes, lambda o: o.subject_id)

    def order(subject_id):
        s = subjects_by_id.get(subject_id)
        # unknown subjects go last
        return (0, s.display_order, subject_id) if s else (1, 0, subject_id)

    progress = []
    for subject_id in sorted(outcomes_by_subject, key=order):
        rate = completion_rate(assessments, outcomes_by_subject[subject_id], students)
        subject = subjects_by_id.get(subject_id)
        progress.append({
            "subjectId": subject_id,
            "subject": subject.name if subject else "Unknown",
            **rate,
        })
    return progress


# ----- Trend -----

def progress_trend(assessments) -> str:
    """Compare the first and the last rating in time; what happens in between is ignored."""
    rated = [a for a in assessments if parse_rating(a.rating)]
    if len(rated) < 2:
        return STABLE

    ordered = chronological(rated)
    first = parse_rating(ordered[0].rating).score
    last = parse_rating(ordered[-1].rating).score
    if last > first:
        return IMPROVING
    if last < first:
        return DECLINING
    return STABLE


def _bucket_key(day, grouping):
    if grouping == "day":
        return day.isoformat()
    if grouping == "week":
        # weeks start on Sunday
        return (day - timedelta(days=(day.weekday() + 1) % 7)).isoformat()
    return f"{day.year}-{day.month:02d}"


def trend_data(assessments, grouping="week"):
    if grouping not in TREND_GROUPINGS:
        raise ValueError(f"grouping must be one of {', '.join(TREND_GROUPINGS)}")

    buckets = {}
    for a in assessments:
        r = parse_rating(a.rating)
        if r is None:
            continue
        key = _bucket_key(as_date(a.assessment_date), grouping)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = {"date": key, **{x.value: 0 for x in Rating}, "total": 0}
            buckets[key] = bucket
        bucket[r.value] += 1
        bucket["total"] += 1

    return [buckets[k] for k in sorted(buckets)]


# ----- Scoring -----

def performance_score(distribution, total) -> int:
    if not total or total <= 0:
        return 0
    points = sum(distribution.get(r.value, 0) * r.score for r in Rating)
    return percent(points, total * MAX_SCORE)


def score_assessments(assessments) -> int:
    assessments = list(assessments)
    return performance_score(rating_distribution(assessments), len(assessments))


def average_score(assessments) -> float:
    """Mean rating on the 1-3 scale to two places; unknown ratings count as 0."""
    assessments = list(assessments)
    if not assessments:
        return 0
    points = sum(rating_score(a.rating) or 0 for a in assessments)
    return round_half_up(points * 100 / len(assessments)) / 100


# ----- Attention lists -----

def students_needing_attention(students, assessments, threshold=50):
    """
    Students whose share of NEEDS_PRACTICE ratings is at or above ``threshold``.

    Worst first; equal percentages keep the roster order. A student with no
    assessments is never listed.
    """
    by_student = group_by(assessments, lambda a: a.student_id)

    flagged = []
    for student in students:
        own = by_student.get(student.id, [])
        if not own:
            continue
        dist = rating_distribution(own)
        pct = dist[Rating.NEEDS_PRACTICE.value] * 100 / len(own)
        if pct < threshold:
            continue
        entry = student_view(student)
        entry.update({
            "assessmentCount": len(own),
            "needsPracticePercentage": round_half_up(pct),
            "ratingDistribution": dist,
        })
        flagged.append((pct, entry))

    flagged.sort(key=lambda item: -item[0])
    return [entry for _, entry in flagged]


def classes_needing_attention(class_stats, max_score=60, limit=5):
    weak = [c for c in class_stats if c["totalAssessments"] > 0 and c["performanceScore"] < max_score]
    weak.sort(key=lambda c: c["performanceScore"])
    return weak[:limit]
