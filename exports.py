# exports.py
"""Flatten report view-models into tables and write them as CSV or XLSX."""
import csv
import io
import logging

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from ratings import Rating, parse_rating

logger = logging.getLogger(__name__)

REPORT_TYPES = ("student", "student-subject", "strand", "outcome", "class", "school")
FORMATS = ("csv", "xlsx")

NOT_ASSESSED = "Not Assessed"


class ExportError(ValueError):
    pass


def _symbol(rating, empty="-"):
    r = parse_rating(rating)
    return r.symbol if r else empty


def _label(rating):
    r = parse_rating(rating)
    return r.short_label if r else NOT_ASSESSED


def _name(person):
    if not person:
        return ""
    return f"{person.get('firstName', '')} {person.get('lastName', '')}".strip()


def _dist_cells(dist):
    return [dist.get(r.value, 0) for r in Rating]


def _dist_headers():
    return [r.symbol for r in Rating]


# ----- One flattener per report type -----

def _student_rows(report):
    headers = ["Subject", "Strand", "Outcome", "Description", "Rating", "Date", "Comment", "Trend"]
    rows = []
    for subject in report.get("subjects", []):
        for strand in subject.get("strands", []):
            for o in strand.get("outcomes", []):
                rows.append([
                    subject["subjectName"],
                    strand["strandName"],
                    o["code"],
                    o["description"],
                    _label(o.get("latestRating")),
                    o.get("assessedAt") or "",
                    o.get("comment") or "",
                    o.get("trend") or "",
                ])
    return headers, rows


def _student_subject_rows(report):
    dates = report.get("assessmentDates", [])
    headers = ["Strand", "Outcome", "Description"] + list(dates)
    rows = []
    for strand in report.get("strands", []):
        for o in strand.get("outcomes", []):
            cells = o.get("assessmentsByDate", {})
            row = [strand["name"], o["code"], o["description"]]
            for d in dates:
                cell = cells.get(d)
                # unassessed dates stay blank
                row.append(_symbol(cell["rating"], empty="") if cell else "")
            rows.append(row)
    return headers, rows


def _strand_rows(report):
    outcomes = report.get("outcomes", [])
    headers = ["Student"] + [o["code"] for o in outcomes] + ["Performance Score"]
    rows = []
    for entry in report.get("studentMatrix", []):
        ratings = entry.get("outcomeRatings", {})
        row = [_name(entry.get("student"))]
        for o in outcomes:
            # JSON round trips turn the outcome ids into strings
            rating = ratings.get(o["id"], ratings.get(str(o["id"])))
            row.append(_symbol(rating))
        row.append(f"{entry.get('performanceScore', 0)}%")
        rows.append(row)
    return headers, rows


def _outcome_rows(report):
    headers = ["Student", "Rating", "Date", "Comment", "Assessments", "Trend"]
    rows = []
    for entry in report.get("studentResults", []):
        rows.append([
            _name(entry.get("student")),
            _label(entry.get("latestRating")),
            entry.get("latestDate") or "",
            entry.get("latestComment") or "",
            entry.get("assessmentCount", 0),
            entry.get("trend") or "",
        ])
    return headers, rows


def _class_rows(report):
    headers = ["Student", "Assessments", "Outcomes Assessed", "Completion"] + _dist_headers() + ["Performance Score"]
    rows = []
    for entry in report.get("studentStats", []):
        rows.append(
            [
                _name(entry.get("student")),
                entry.get("totalAssessments", 0),
                entry.get("assessedOutcomes", 0),
                f"{entry.get('completionRate', 0)}%",
            ]
            + _dist_cells(entry.get("ratingDistribution", {}))
            + [f"{entry.get('performanceScore', 0)}%"]
        )
    return headers, rows


def _school_rows(report):
    headers = ["Class", "Teacher", "Students", "Assessments", "Completion"] + _dist_headers() + ["Performance Score"]
    rows = []
    for entry in report.get("classStats", []):
        rows.append(
            [
                entry.get("className", ""),
                entry.get("teacher") or "",
                entry.get("studentCount", 0),
                entry.get("totalAssessments", 0),
                f"{entry.get('completionRate', 0)}%",
            ]
            + _dist_cells(entry.get("ratingDistribution", {}))
            + [f"{entry.get('performanceScore', 0)}%"]
        )
    return headers, rows


_FLATTENERS = {
    "student": _student_rows,
    "student-subject": _student_subject_rows,
    "strand": _strand_rows,
    "outcome": _outcome_rows,
    "class": _class_rows,
    "school": _school_rows,
}


def tabulate(report, report_type):
    try:
        flatten = _FLATTENERS[report_type]
    except KeyError:
        raise ExportError(f"Unknown report type: {report_type}") from None
    return flatten(report or {})


# ----- Writers -----

def to_csv(report, report_type) -> bytes:
    headers, rows = tabulate(report, report_type)
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(headers)
    writer.writerows(rows)
    logger.debug("csv export %s: %d rows", report_type, len(rows))
    return out.getvalue().encode("utf-8")


def to_xlsx(report, report_type) -> io.BytesIO:
    headers, rows = tabulate(report, report_type)
    wb = Workbook()
    ws = wb.active
    ws.title = report_type.replace("-", " ").title()[:31]

    ws.append(headers)
    for row in rows:
        ws.append(row)

    ws.freeze_panes = "A2"
    for idx, h in enumerate(headers, start=1):
        width = 14
        if h in ("Student", "Class", "Teacher", "Subject", "Strand"):
            width = 24
        elif h in ("Description", "Comment"):
            width = 40
        ws.column_dimensions[get_column_letter(idx)].width = width

    out = io.BytesIO()
    wb.save(out)
    out.seek(0)
    logger.debug("xlsx export %s: %d rows", report_type, len(rows))
    return out


def export(report, report_type, fmt):
    """Return (payload, mimetype, filename) for a report in the given format."""
    if fmt == "csv":
        return io.BytesIO(to_csv(report, report_type)), "text/csv", f"{report_type}-report.csv"
    if fmt == "xlsx":
        return (
            to_xlsx(report, report_type),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            f"{report_type}-report.xlsx",
        )
    raise ExportError(f"format must be one of {', '.join(FORMATS)}")
