from datetime import date

import records
import reports


# ----- Strand matrix -----

def test_strand_matrix_cell_is_latest_rating(assess, roster, curriculum, klass):
    rows = [
        assess(1, 101, "2024-10-01", "EASILY_MEETING"),
        assess(1, 101, "2024-09-01", "NEEDS_PRACTICE"),
        assess(2, 102, "2024-09-15", "MEETING"),
    ]
    report = reports.strand_report(10, 5, students=roster, assessments=rows,
                                   curriculum=curriculum, classes=[klass])

    assert [o["code"] for o in report["outcomes"]] == ["1.1.1", "1.1.2"]
    # roster sorted by last name: Charles, Edmund, Joseph
    assert [r["student"]["id"] for r in report["studentMatrix"]] == [2, 3, 1]

    joseph = report["studentMatrix"][2]
    assert joseph["outcomeRatings"] == {101: "EASILY_MEETING", 102: None}
    assert joseph["assessedCount"] == 1
    # score uses every row, not only the latest one
    assert joseph["performanceScore"] == 67

    stats = report["overallStats"]
    assert stats["totalStudents"] == 3
    assert stats["totalAssessments"] == 3
    # (50 + 0 + 50) / 3
    assert stats["averageCompletion"] == 33


def test_strand_matrix_scopes_by_term_and_roster(assess, roster, curriculum, klass):
    rows = [
        assess(1, 101, "2024-09-01", "MEETING", term_id=1),
        assess(1, 101, "2025-02-01", "NEEDS_PRACTICE", term_id=2),
        assess(42, 101, "2024-09-01", "MEETING", term_id=1),
        assess(1, 201, "2024-09-01", "MEETING", term_id=1),
    ]
    report = reports.strand_report(10, 5, students=roster, assessments=rows, curriculum=curriculum,
                                   classes=[klass], term_id=1)
    joseph = next(r for r in report["studentMatrix"] if r["student"]["id"] == 1)
    assert joseph["outcomeRatings"][101] == "MEETING"
    assert report["overallStats"]["totalAssessments"] == 1


def test_strand_report_skips_inactive_students(assess, roster, curriculum, klass):
    left = records.Student(id=9, first_name="Zed", last_name="Adams", class_id=5, is_active=False)
    report = reports.strand_report(10, 5, students=roster + [left], assessments=[],
                                   curriculum=curriculum, classes=[klass])
    assert 9 not in [r["student"]["id"] for r in report["studentMatrix"]]


def test_strand_report_for_unknown_strand_is_empty(roster, curriculum, klass):
    report = reports.strand_report(999, 5, students=roster, assessments=[],
                                   curriculum=curriculum, classes=[klass])
    assert report["strand"] is None
    assert report["studentMatrix"] == []
    assert report["overallStats"]["performanceScore"] == 0
    assert report["overallStats"]["averageCompletion"] == 0


# ----- Student x subject -----

def test_student_subject_dates_are_the_sorted_union(assess, roster, curriculum):
    rows = [
        assess(1, 101, "2024-10-18", "MEETING"),
        assess(1, 101, "2024-09-20", "NEEDS_PRACTICE"),
        assess(1, 111, "2024-11-22", "EASILY_MEETING", comment="Great"),
        assess(1, 201, "2024-12-01", "MEETING"),  # other subject
        assess(2, 102, "2024-09-01", "MEETING"),  # other student
    ]
    report = reports.student_subject_report(1, 1, students=roster, assessments=rows, curriculum=curriculum)

    assert report["assessmentDates"] == ["2024-09-20", "2024-10-18", "2024-11-22"]
    assert [s["name"] for s in report["strands"]] == ["Pushes and Pulls", "Weather and Climate"]

    push, weather = report["strands"]
    first, second = push["outcomes"]
    assert first["assessmentsByDate"] == {
        "2024-09-20": {"rating": "NEEDS_PRACTICE", "comment": ""},
        "2024-10-18": {"rating": "MEETING", "comment": ""},
    }
    # missing cells are absent rather than zeroed
    assert second["assessmentsByDate"] == {}
    assert weather["outcomes"][0]["assessmentsByDate"]["2024-11-22"]["comment"] == "Great"

    summary = report["summary"]
    assert summary["totalOutcomes"] == 3
    assert summary["assessedOutcomes"] == 2
    assert summary["completionRate"] == 67
    assert summary["performanceScore"] == 67


def test_student_subject_same_day_later_row_wins(assess, roster, curriculum):
    rows = [
        assess(1, 101, "2024-09-20", "MEETING", id=2),
        assess(1, 101, "2024-09-20", "NEEDS_PRACTICE", id=1),
    ]
    report = reports.student_subject_report(1, 1, students=roster, assessments=rows, curriculum=curriculum)
    cell = report["strands"][0]["outcomes"][0]["assessmentsByDate"]["2024-09-20"]
    assert cell["rating"] == "MEETING"


def test_student_subject_term_header_and_filter(assess, roster, curriculum):
    term = records.Term(id=1, name="Term 1", school_year="2024/25",
                        start_date=date(2024, 9, 1), end_date=date(2024, 12, 20))
    rows = [assess(1, 101, "2024-09-20", "MEETING", term_id=1),
            assess(1, 101, "2025-01-20", "MEETING", term_id=2)]
    report = reports.student_subject_report(1, 1, students=roster, assessments=rows,
                                            curriculum=curriculum, term=term)
    assert report["term"] == {"name": "Term 1", "schoolYear": "2024/25",
                              "startDate": "2024-09-01", "endDate": "2024-12-20"}
    assert report["assessmentDates"] == ["2024-09-20"]


def test_student_subject_unknown_student_is_empty(roster, curriculum):
    report = reports.student_subject_report(404, 1, students=roster, assessments=[], curriculum=curriculum)
    assert report["student"] is None
    assert report["subject"] == {"id": 1, "name": "Science"}
    assert report["assessmentDates"] == []
    assert report["strands"] == []
    assert report["summary"]["completionRate"] == 0


# ----- Student -----

def test_student_report_breaks_down_by_subject_and_strand(assess, roster, curriculum, klass):
    school = records.School(id=1, name="Castries Primary School")
    rows = [
        assess(1, 101, "2024-09-20", "NEEDS_PRACTICE"),
        assess(1, 101, "2024-10-18", "EASILY_MEETING", comment="Much better"),
        assess(1, 201, "2024-10-18", "MEETING"),
    ]
    report = reports.student_report(1, students=roster, assessments=rows, curriculum=curriculum,
                                    classes=[klass], schools=[school])

    assert report["student"]["class"] == "K1 Butterflies"
    assert report["student"]["school"] == "Castries Primary School"
    assert report["overallStats"]["totalAssessments"] == 3
    assert report["overallStats"]["assessedOutcomes"] == 2
    assert report["overallStats"]["completionRate"] == 50

    assert [s["subjectName"] for s in report["subjects"]] == ["Science", "Mathematics"]
    science = report["subjects"][0]
    # only strands with assessments are listed
    assert [s["strandName"] for s in science["strands"]] == ["Pushes and Pulls"]
    push = science["strands"][0]
    assert push["completionRate"] == 50
    first = push["outcomes"][0]
    assert first["latestRating"] == "EASILY_MEETING"
    assert first["assessedAt"] == "2024-10-18"
    assert first["comment"] == "Much better"
    assert first["trend"] == "improving"
    assert push["outcomes"][1]["latestRating"] is None


def test_student_report_for_missing_student(curriculum):
    report = reports.student_report(5, students=[], assessments=[], curriculum=curriculum)
    assert report["student"] is None
    assert report["subjects"] == []
    assert report["overallStats"]["performanceScore"] == 0


# ----- Outcome -----

def test_outcome_report_latest_and_history(assess, roster, curriculum, klass):
    term = records.Term(id=1, name="Term 1", school_year="2024/25",
                        start_date=date(2024, 9, 1), end_date=date(2024, 12, 20))
    teacher = records.User(id=7, role="TEACHER", first_name="Grace", last_name="Mathurin")
    rows = [
        assess(1, 101, "2024-10-18", "MEETING", teacher_id=7),
        assess(1, 101, "2024-09-20", "NEEDS_PRACTICE", teacher_id=7),
        assess(2, 101, "2024-09-20", "EASILY_MEETING"),
        assess(2, 102, "2024-09-20", "NEEDS_PRACTICE"),
    ]
    report = reports.outcome_report(101, 5, students=roster, assessments=rows, curriculum=curriculum,
                                    classes=[klass], terms=[term], users=[teacher])

    assert report["outcome"]["strandName"] == "Pushes and Pulls"
    by_id = {r["student"]["id"]: r for r in report["studentResults"]}
    joseph = by_id[1]
    assert joseph["latestRating"] == "MEETING"
    assert joseph["trend"] == "improving"
    assert [h["date"] for h in joseph["history"]] == ["2024-09-20", "2024-10-18"]
    assert joseph["history"][0]["term"] == "Term 1"
    assert joseph["history"][0]["assessedBy"] == "Grace Mathurin"

    stats = report["overallStats"]
    assert stats["totalStudents"] == 3
    assert stats["assessedStudents"] == 2
    assert stats["notAssessed"] == 1
    # distribution over the latest rating per student
    assert stats["ratingDistribution"] == {"EASILY_MEETING": 1, "MEETING": 1, "NEEDS_PRACTICE": 0}
    assert [s["id"] for s in report["notAssessedStudents"]] == [3]


def test_outcome_report_for_unknown_class(roster, curriculum):
    report = reports.outcome_report(101, 77, students=roster, assessments=[], curriculum=curriculum,
                                    classes=[])
    assert report["class"] is None
    assert report["outcome"]["code"] == "1.1.1"
    assert report["studentResults"] == []


# ----- Class / school -----

def test_class_summary(assess, roster, curriculum, klass):
    teacher = records.User(id=7, role="TEACHER", first_name="Grace", last_name="Mathurin")
    rows = [
        assess(1, 101, "2024-09-20", "NEEDS_PRACTICE"),
        assess(1, 102, "2024-09-20", "NEEDS_PRACTICE"),
        assess(2, 201, "2024-09-20", "EASILY_MEETING"),
    ]
    report = reports.class_summary(5, students=roster, assessments=rows, curriculum=curriculum,
                                   classes=[klass], users=[teacher])

    assert report["class"]["teacher"] == "Grace Mathurin"
    assert report["overallStats"]["studentCount"] == 3
    assert report["overallStats"]["totalAssessments"] == 3
    assert [s["subjectName"] for s in report["subjectSummary"]] == ["Science", "Mathematics"]
    assert [s["id"] for s in report["studentsNeedingAttention"]] == [1]
    charles = report["studentStats"][0]
    assert charles["student"]["lastName"] == "Charles"
    assert charles["performanceScore"] == 100


def test_school_summary_flags_weak_classes(assess, roster, curriculum, klass):
    school = records.School(id=1, name="Castries Primary School", country_id=3)
    country = records.Country(id=3, name="Saint Lucia")
    empty = records.SchoolClass(id=6, name="K2 Ladybirds", school_id=1)
    rows = [assess(1, 101, "2024-09-20", "NEEDS_PRACTICE"), assess(2, 101, "2024-09-20", "MEETING")]

    report = reports.school_summary(1, schools=[school], classes=[klass, empty], students=roster,
                                    assessments=rows, curriculum=curriculum, countries=[country])

    assert report["school"] == {"id": 1, "name": "Castries Primary School", "country": "Saint Lucia"}
    assert report["overallStats"]["classCount"] == 2
    assert report["overallStats"]["studentCount"] == 3
    assert report["classStats"][1]["teacher"] == "Unassigned"
    assert report["classStats"][1]["studentCount"] == 0
    # 3 points of 6 -> 50; the empty class is never flagged
    assert [c["classId"] for c in report["classesNeedingAttention"]] == [5]


def test_class_statistics(assess, roster, curriculum):
    rows = [
        assess(1, 101, "2024-09-20", "NEEDS_PRACTICE"),
        assess(1, 101, "2024-10-20", "MEETING"),
    ]
    stats = reports.class_statistics(rows, roster, curriculum.outcomes, subjects=curriculum.subjects)
    assert stats["completionRate"] == {"total": 12, "completed": 1, "percentage": 8}
    assert stats["assessmentVolume"]["assessments"] == 2
    assert stats["coverage"]["covered"] == 1
    assert stats["performancePercentage"] == 50
    assert [s["id"] for s in stats["studentsNeedingAttention"]] == [1]


def test_strand_average_completion_is_the_mean_of_student_rates(assess, roster, curriculum, klass):
    fourth = records.Student(id=4, first_name="Tariq", last_name="Louis", class_id=5)
    rows = [assess(1, 101, "2024-09-01", "MEETING")]
    report = reports.strand_report(10, 5, students=roster + [fourth], assessments=rows,
                                   curriculum=curriculum, classes=[klass])
    # (50 + 0 + 0 + 0) / 4 = 12.5
    assert report["overallStats"]["averageCompletion"] == 13


def test_stats_carry_average_score(assess, roster, curriculum, klass):
    rows = [assess(1, 101, "2024-09-20", "EASILY_MEETING"), assess(1, 102, "2024-09-20", "MEETING")]
    report = reports.class_summary(5, students=roster, assessments=rows, curriculum=curriculum,
                                   classes=[klass])
    assert report["overallStats"]["averageScore"] == 2.5
    joseph = next(s for s in report["studentStats"] if s["student"]["id"] == 1)
    assert joseph["averageScore"] == 2.5
    assert report["studentStats"][0]["averageScore"] == 0
