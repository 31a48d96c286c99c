from dataclasses import replace

from fakes import make_result
from models.analysis_result import HistoryItem
from services.report import DISCLAIMER, render_report, report_filename


def test_report_has_fixed_sections():
    record = HistoryItem.from_result(
        make_result("r-1", findings=["Opacity in left lung", "Mild effusion"]), "data:image/png;base64,AA=="
    )

    report = render_report(record)

    for header in ("DIAGNOSIS", "CONFIDENCE", "SEVERITY", "FINDINGS", "RECOMMENDATION"):
        assert f"\n{header}\n{'-' * len(header)}\n" in report
    assert "Patient ID: r-1" in report
    assert "Date: 2025-01-02 03:04:05 UTC" in report
    assert "88%" in report
    assert "Opacity in left lung\nMild effusion" in report
    assert report.endswith(DISCLAIMER)
    assert report_filename(record) == "neuroscan-report-r-1.txt"


def test_report_with_unparseable_date():
    record = replace(HistoryItem.from_result(make_result(), ""), date="yesterday")

    assert "Date: Unknown" in render_report(record)
