#!/usr/bin/env python3
"""
Read and write JUnit XML reports as produced by gotestsum.

The in-memory model only exposes what the enhancer needs (suite name and test
count, case classname/name/time/file, failure and skip payloads); every other
attribute and child element is carried along untouched so that a report can
be decoded, modified and written back without losing data.
"""

import copy
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'
INDENT = "  "


class ReportError(Exception):
    """Base class for report I/O failures."""


class ReportReadError(ReportError):
    """The report file could not be read."""


class ReportDecodeError(ReportError):
    """The report bytes are not a JUnit XML document."""


class ReportWriteError(ReportError):
    """The enhanced report could not be written."""


@dataclass(frozen=True)
class JUnitFailure:
    """Failure (or error) payload of a test case."""
    message: str = ""
    type: str = ""
    contents: str = ""
    kind: str = "failure"


@dataclass
class JUnitTestCase:
    attrib: Dict[str, str] = field(default_factory=dict)
    children: List[ET.Element] = field(default_factory=list)
    text: Optional[str] = None

    @property
    def classname(self) -> str:
        return self.attrib.get("classname", "")

    @property
    def name(self) -> str:
        return self.attrib.get("name", "")

    @property
    def time(self) -> str:
        return self.attrib.get("time", "")

    @property
    def file(self) -> str:
        return self.attrib.get("file", "")

    @file.setter
    def file(self, value: str):
        if value:
            self.attrib["file"] = value
        else:
            self.attrib.pop("file", None)

    @property
    def failure(self) -> Optional[JUnitFailure]:
        for child in self.children:
            if child.tag in ("failure", "error"):
                return JUnitFailure(
                    message=child.get("message", ""),
                    type=child.get("type", ""),
                    contents=child.text or "",
                    kind=child.tag,
                )
        return None

    @property
    def skipped(self) -> Optional[str]:
        """Skip message, or None when the case was not skipped."""
        for child in self.children:
            if child.tag == "skipped":
                return child.get("message", "")
        return None

    @classmethod
    def from_element(cls, element: ET.Element) -> "JUnitTestCase":
        return cls(dict(element.attrib), list(element), element.text)

    def to_element(self) -> ET.Element:
        element = ET.Element("testcase", self.attrib)
        if self.text and self.text.strip():
            element.text = self.text
        for child in self.children:
            element.append(copy.deepcopy(child))
        return element


@dataclass
class JUnitTestSuite:
    """A testsuite element. children keeps cases and other elements in document order."""
    attrib: Dict[str, str] = field(default_factory=dict)
    children: List[Union[JUnitTestCase, ET.Element]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.attrib.get("name", "")

    @property
    def tests(self) -> int:
        """Declared number of tests; a missing attribute counts as zero."""
        return int(self.attrib.get("tests") or 0)

    @property
    def cases(self) -> List[JUnitTestCase]:
        return [child for child in self.children if isinstance(child, JUnitTestCase)]

    def remove_case(self, case: JUnitTestCase):
        self.children = [child for child in self.children if child is not case]

    @classmethod
    def from_element(cls, element: ET.Element) -> "JUnitTestSuite":
        tests = element.get("tests")
        if tests:
            try:
                int(tests)
            except ValueError:
                raise ReportDecodeError(
                    f"Invalid tests count {tests!r} in testsuite {element.get('name', '')!r}"
                ) from None

        children = []
        for child in element:
            if child.tag == "testcase":
                children.append(JUnitTestCase.from_element(child))
            else:
                children.append(child)
        return cls(dict(element.attrib), children)

    def to_element(self) -> ET.Element:
        element = ET.Element("testsuite", self.attrib)
        for child in self.children:
            if isinstance(child, JUnitTestCase):
                element.append(child.to_element())
            else:
                element.append(copy.deepcopy(child))
        return element


@dataclass
class JUnitTestSuites:
    """
    A whole report.

    Reports whose root is a single <testsuite> are wrapped in a JUnitTestSuites
    with root_tag "testsuite" and written back the same way while that suite
    is still present. Once it has been removed the root's attributes are gone
    with it, and the report is written as an empty <testsuites/>.
    """
    attrib: Dict[str, str] = field(default_factory=dict)
    children: List[Union[JUnitTestSuite, ET.Element]] = field(default_factory=list)
    root_tag: str = "testsuites"

    @property
    def suites(self) -> List[JUnitTestSuite]:
        return [child for child in self.children if isinstance(child, JUnitTestSuite)]

    def remove_suite(self, suite: JUnitTestSuite):
        self.children = [child for child in self.children if child is not suite]

    def iter_cases(self):
        for suite in self.suites:
            for case in suite.cases:
                yield suite, case

    def to_element(self) -> ET.Element:
        suites = self.suites
        if self.root_tag == "testsuite" and len(suites) == 1:
            return suites[0].to_element()

        element = ET.Element("testsuites", self.attrib)
        for child in self.children:
            if isinstance(child, JUnitTestSuite):
                element.append(child.to_element())
            else:
                element.append(copy.deepcopy(child))
        return element


def parse_junit_bytes(data: bytes) -> JUnitTestSuites:
    """
    Decode a JUnit XML document.

    Args:
        data (bytes): Raw report contents.

    Returns:
        JUnitTestSuites: The decoded report.

    Raises:
        ReportDecodeError: If the XML is malformed, the root element is neither
            <testsuites> nor <testsuite>, or a suite has a non-integer test count.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ReportDecodeError(f"Failed to parse XML: {e}") from e

    if root.tag == "testsuite":
        return JUnitTestSuites(children=[JUnitTestSuite.from_element(root)], root_tag="testsuite")
    if root.tag != "testsuites":
        raise ReportDecodeError(f"Unexpected root element <{root.tag}>, expected <testsuites>")

    children = []
    for child in root:
        if child.tag == "testsuite":
            children.append(JUnitTestSuite.from_element(child))
        else:
            children.append(child)
    return JUnitTestSuites(dict(root.attrib), children)


def to_junit_bytes(report: JUnitTestSuites) -> bytes:
    """Encode a report as indented UTF-8 XML preceded by an XML declaration."""
    root = report.to_element()
    ET.indent(root, space=INDENT)
    return (XML_HEADER + ET.tostring(root, encoding="unicode") + "\n").encode("utf-8")


def read_junit_file(path) -> JUnitTestSuites:
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise ReportReadError(f"Failed to read input file: {e}") from e
    return parse_junit_bytes(data)


def write_junit_file(report: JUnitTestSuites, path):
    output = to_junit_bytes(report)
    try:
        with open(path, 'wb') as f:
            f.write(output)
    except OSError as e:
        raise ReportWriteError(f"Failed to write output file: {e}") from e
