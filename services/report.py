"""Plain-text report for downloading a stored analysis."""

from datetime import datetime

from models.analysis_result import HistoryItem

DISCLAIMER = (
    "This is a computer-generated report. Please consult with a qualified healthcare professional.\n"
    "NeuroScan Medical Systems. Research Prototype."
)


def _format_date(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except (TypeError, ValueError):
        return "Unknown"


def _section(title: str, body: str) -> str:
    return f"{title}\n{'-' * len(title)}\n{body}"


def render_report(record: HistoryItem) -> str:
    """Render `record` with fixed section headers and the disclaimer footer."""
    title = "NeuroScan AI - Medical Analysis Report"
    sections = [
        f"{title}\n{'=' * len(title)}",
        f"Date: {_format_date(record.date)}\nPatient ID: {record.id or 'N/A'}",
        _section("DIAGNOSIS", record.diagnosis.value),
        _section("CONFIDENCE", f"{record.confidence}%"),
        _section("SEVERITY", record.severity.value),
        _section("FINDINGS", "\n".join(record.findings)),
        _section("RECOMMENDATION", record.recommendation),
        f"---\n{DISCLAIMER}",
    ]
    return "\n\n".join(sections)


def report_filename(record: HistoryItem) -> str:
    return f"neuroscan-report-{record.id}.txt"
