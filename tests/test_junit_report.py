"""Tests for reading and writing JUnit XML reports."""

import xml.etree.ElementTree as ET

import pytest

from junit_report import (
    XML_HEADER,
    JUnitFailure,
    ReportDecodeError,
    ReportReadError,
    ReportWriteError,
    parse_junit_bytes,
    read_junit_file,
    to_junit_bytes,
    write_junit_file,
)


def case_fields(report):
    fields = []
    for suite, case in report.iter_cases():
        fields.append((suite.name, case.classname, case.name, case.time, case.file,
                       case.failure, case.skipped))
    return fields


class TestParse:

    def test_gotestsum_report(self, junit_report_path):
        report = read_junit_file(junit_report_path)

        assert [suite.name for suite in report.suites] == [
            "",
            "github.com/example/gorepo/math",
            "github.com/example/gorepo/testmainfailure",
            "example.com/service/calc",
        ]
        assert [suite.tests for suite in report.suites] == [0, 7, 2, 3]

        math_suite = report.suites[1]
        by_name = {case.name: case for case in math_suite.cases}
        assert by_name["TestDivide"].classname == "github.com/example/gorepo/math"
        assert by_name["TestDivide"].time == "0.000000"
        assert by_name["TestDivide"].file == ""
        assert by_name["TestDivide"].failure is None
        assert by_name["TestDivide"].skipped is None

        failure = by_name["TestDivideByZero"].failure
        assert failure.message == "Failed"
        assert failure.kind == "failure"
        assert "math_test.go:22" in failure.contents
        assert by_name["TestGhost"].skipped.startswith("=== RUN   TestGhost\n")

        assert report.suites[3].cases[2].file == "service/auth/token_test.go"

    def test_error_element_is_a_failure(self):
        report = parse_junit_bytes(
            b'<testsuites><testsuite name="s" tests="1">'
            b'<testcase classname="c" name="TestX"><error message="panic" type="runtime">boom</error></testcase>'
            b'</testsuite></testsuites>'
        )

        assert report.suites[0].cases[0].failure == JUnitFailure("panic", "runtime", "boom", "error")

    def test_missing_tests_attribute_counts_as_zero(self):
        report = parse_junit_bytes(b'<testsuites><testsuite name=""></testsuite></testsuites>')

        assert report.suites[0].tests == 0

    def test_invalid_xml(self):
        with pytest.raises(ReportDecodeError, match="Failed to parse XML"):
            parse_junit_bytes(b"<testsuites><testsuite>")

    def test_unknown_root_element(self):
        with pytest.raises(ReportDecodeError, match="Unexpected root element"):
            parse_junit_bytes(b"<results/>")

    def test_invalid_test_count(self):
        with pytest.raises(ReportDecodeError, match="Invalid tests count"):
            parse_junit_bytes(b'<testsuites><testsuite name="s" tests="many"/></testsuites>')

    def test_missing_file(self, tmp_path):
        with pytest.raises(ReportReadError, match="Failed to read input file"):
            read_junit_file(tmp_path / "missing.xml")


class TestWrite:

    def test_round_trip_preserves_content(self, junit_report_path):
        original = read_junit_file(junit_report_path)

        output = to_junit_bytes(original)
        decoded = parse_junit_bytes(output)

        assert output.startswith(XML_HEADER.encode())
        assert case_fields(decoded) == case_fields(original)
        assert [suite.attrib for suite in decoded.suites] == [suite.attrib for suite in original.suites]
        assert decoded.attrib == original.attrib

    def test_round_trip_keeps_unmodelled_elements_and_attributes(self):
        data = (
            b'<testsuites name="run">'
            b'<testsuite name="s" tests="1" hostname="ci-1">'
            b'<properties><property name="go.version" value="go1.22.0"/></properties>'
            b'<testcase classname="c" name="TestX" time="0.1" line="12">'
            b'<system-out>hello &amp; goodbye</system-out>'
            b'</testcase>'
            b'<system-err>noise</system-err>'
            b'</testsuite>'
            b'</testsuites>'
        )

        root = ET.fromstring(to_junit_bytes(parse_junit_bytes(data)))

        suite = root.find("testsuite")
        assert root.get("name") == "run"
        assert suite.get("hostname") == "ci-1"
        assert suite.find("properties/property").get("value") == "go1.22.0"
        assert [child.tag for child in suite] == ["properties", "testcase", "system-err"]
        assert suite.find("testcase").get("line") == "12"
        assert suite.find("testcase/system-out").text == "hello & goodbye"

    def test_file_attribute(self):
        report = parse_junit_bytes(
            b'<testsuites><testsuite name="main" tests="1">'
            b'<testcase classname="github.com/example/main" name="TestExample" time="0.000000"></testcase>'
            b'</testsuite></testsuites>'
        )

        report.suites[0].cases[0].file = "main_test.go"

        assert b'file="main_test.go"' in to_junit_bytes(report)

    def test_empty_file_is_not_written(self):
        report = parse_junit_bytes(
            b'<testsuites><testsuite name="main" tests="1">'
            b'<testcase classname="main" name="TestExample" file="old_test.go"/>'
            b'</testsuite></testsuites>'
        )

        report.suites[0].cases[0].file = ""

        assert b"file=" not in to_junit_bytes(report)

    def test_output_is_indented(self):
        report = parse_junit_bytes(
            b'<testsuites><testsuite name="s" tests="1"><testcase classname="c" name="TestX"/></testsuite></testsuites>'
        )

        lines = to_junit_bytes(report).decode().splitlines()

        assert lines[0] == XML_HEADER.strip()
        assert lines[1] == "<testsuites>"
        assert lines[2].startswith('  <testsuite name="s"')
        assert lines[3].startswith('    <testcase classname="c"')

    def test_single_testsuite_root_is_preserved(self):
        report = parse_junit_bytes(b'<testsuite name="pytest" tests="1"><testcase classname="c" name="t"/></testsuite>')

        root = ET.fromstring(to_junit_bytes(report))

        assert root.tag == "testsuite"
        assert root.get("name") == "pytest"

    def test_removed_single_testsuite_root_becomes_empty_testsuites(self):
        report = parse_junit_bytes(b'<testsuite name="" tests="0" hostname="ci"><testcase name="TestX"/></testsuite>')

        report.remove_suite(report.suites[0])

        root = ET.fromstring(to_junit_bytes(report))
        assert root.tag == "testsuites"
        assert root.attrib == {}
        assert list(root) == []

    def test_removed_cases_and_suites_are_not_written(self):
        report = parse_junit_bytes(
            b'<testsuites>'
            b'<testsuite name="a" tests="2"><testcase name="TestKeep"/><testcase name="TestMain"/></testsuite>'
            b'<testsuite name="b" tests="0"/>'
            b'</testsuites>'
        )
        suite_a, suite_b = report.suites

        suite_a.remove_case(suite_a.cases[1])
        report.remove_suite(suite_b)

        root = ET.fromstring(to_junit_bytes(report))
        assert [case.get("name") for case in root.iter("testcase")] == ["TestKeep"]
        assert [suite.get("name") for suite in root.iter("testsuite")] == ["a"]

    def test_write_file(self, tmp_path, junit_report_path):
        report = read_junit_file(junit_report_path)
        output_path = tmp_path / "out.xml"

        write_junit_file(report, output_path)

        assert case_fields(read_junit_file(output_path)) == case_fields(report)

    def test_unwritable_output(self, tmp_path, junit_report_path):
        report = read_junit_file(junit_report_path)

        with pytest.raises(ReportWriteError, match="Failed to write output file"):
            write_junit_file(report, tmp_path)
