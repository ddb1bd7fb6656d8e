"""
Unit tests for run result formatters.
"""

import csv
import io
import json
from datetime import datetime, timezone

import pytest

from hostcheck._types import CheckOutcome, CheckSpec, OutcomeStatus
from hostcheck.output import (
    EXIT_ABORTED,
    EXIT_FAILED,
    EXIT_OK,
    RunResult,
    format_csv,
    format_json,
    parse_output_spec,
    write_output,
)
from hostcheck.output.csv_fmt import COLUMNS


@pytest.fixture
def run_result():
    return RunResult(
        timestamp=datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc),
        checklist="web tier",
        host="web01",
        outcomes=[
            CheckOutcome(
                spec=CheckSpec("PortTCP", ("443",), title="https open"),
                status=OutcomeStatus.PASS,
                duration_ms=3,
            ),
            CheckOutcome(
                spec=CheckSpec("Installed", ("nginx",)),
                status=OutcomeStatus.FAIL,
                code=1,
                message="Package nginx was not found with dpkg",
                duration_ms=41,
            ),
            CheckOutcome(
                spec=CheckSpec("Temp", ("80",)),
                status=OutcomeStatus.ERROR,
                code=1,
                message="Required utility not found: sensors",
                error_code="MISSING_DEPENDENCY",
            ),
        ],
    )


@pytest.mark.unit
class TestRunResult:
    """Test summary counts and exit codes."""

    def test_counts(self, run_result) -> None:
        assert (run_result.total, run_result.pass_count, run_result.fail_count, run_result.error_count) == (3, 1, 1, 1)

    def test_exit_codes(self, run_result) -> None:
        assert run_result.exit_code == EXIT_FAILED
        assert RunResult(outcomes=run_result.outcomes[:1]).exit_code == EXIT_OK
        assert RunResult(aborted=True).exit_code == EXIT_ABORTED


@pytest.mark.unit
class TestJSONFormat:
    """Test JSON output."""

    def test_document(self, run_result) -> None:
        data = json.loads(format_json(run_result))
        assert data["timestamp"] == "2024-05-06T12:00:00+00:00"
        assert data["checklist"] == "web tier"
        assert data["host"] == "web01"
        assert data["aborted"] is False
        assert data["summary"] == {"total": 3, "pass": 1, "fail": 1, "error": 1, "skip": 0, "exit_code": 1}

    def test_results(self, run_result) -> None:
        results = json.loads(format_json(run_result))["results"]
        assert results[0] == {
            "id": "PortTCP",
            "parameters": ["443"],
            "title": "https open",
            "status": "pass",
            "passed": True,
            "code": 0,
            "message": "",
            "duration_ms": 3,
        }
        assert "error_code" not in results[1]
        assert results[2]["error_code"] == "MISSING_DEPENDENCY"


@pytest.mark.unit
class TestCSVFormat:
    """Test CSV output."""

    def test_rows(self, run_result) -> None:
        rows = list(csv.DictReader(io.StringIO(format_csv(run_result))))
        assert len(rows) == 3
        assert rows[1]["id"] == "Installed"
        assert rows[1]["status"] == "fail"
        assert rows[1]["host"] == "web01"
        assert rows[2]["error_code"] == "MISSING_DEPENDENCY"

    def test_multiline_message_quoted(self) -> None:
        outcome = CheckOutcome(
            spec=CheckSpec("Port", ("8080",)),
            status=OutcomeStatus.FAIL,
            code=1,
            message="Port not open:\n\tSpecified: 8080\n\tActual: 22",
        )
        rows = list(csv.DictReader(io.StringIO(format_csv(RunResult(host="h", outcomes=[outcome])))))
        assert rows[0]["message"] == outcome.message

    def test_header_only_when_empty(self) -> None:
        assert format_csv(RunResult()) == ",".join(COLUMNS) + "\n"


@pytest.mark.unit
class TestWriteOutput:
    """Test output spec parsing and writing."""

    @pytest.mark.parametrize(
        "spec,expected",
        [
            ("json", ("json", None)),
            ("CSV:results.csv", ("csv", "results.csv")),
            ("json:/tmp/a:b.json", ("json", "/tmp/a:b.json")),
        ],
    )
    def test_parse_output_spec(self, spec, expected) -> None:
        assert parse_output_spec(spec) == expected

    def test_write_to_file(self, run_result, tmp_path) -> None:
        path = tmp_path / "results.json"
        output = write_output(run_result, "json", str(path))
        assert path.read_text() == output

    def test_unknown_format(self, run_result) -> None:
        with pytest.raises(ValueError, match="Unknown output format: xml"):
            write_output(run_result, "xml")
