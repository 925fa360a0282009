#!/usr/bin/env python3
"""
Map JUnit test cases to the Go test files that declare them.

resolve() looks a (classname, name) pair up in a SourceIndex, trying a chain of
progressively looser keys. enhance_report() runs it over every case of a
report, dropping the placeholder entries gotestsum emits for packages without
tests and for a failing TestMain.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from find_tests import SourceIndex
from junit_report import JUnitTestSuites
from utils.logger import LOGGER_NAME

# Name gotestsum gives the package-wide entry when TestMain (or the build) fails
RESERVED_ENTRY_POINT = "TestMain"


class Tier(Enum):
    """Resolution strategies, in the order they are tried."""
    IMPORT_PATH = "import-path"
    PACKAGE = "package"
    NAME = "name"
    PARENT_PACKAGE = "parent-package"
    PARENT_NAME = "parent-name"
    SUBSTRING = "substring"


class MatchStatus(Enum):
    ALREADY_SET = "already-set"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class MatchResult:
    suite: str
    classname: str
    name: str
    status: MatchStatus
    file: str = ""
    tier: Optional[Tier] = None


@dataclass
class EnhancementResult:
    report: JUnitTestSuites
    matched: int = 0
    total: int = 0
    results: List[MatchResult] = field(default_factory=list)
    dropped_suites: int = 0
    dropped_cases: int = 0

    @property
    def unmatched(self) -> int:
        return self.total - self.matched


def package_name(classname: str) -> str:
    """Strip the module path prefix from a classname: "example.com/repo/pkg" -> "pkg"."""
    return classname.split("/")[-1]


def parent_test_name(name: str) -> Optional[str]:
    """Return the top-level test of a subtest or fuzz input name, or None for plain names."""
    if "/" not in name:
        return None
    return name.split("/")[0]


def resolve_with_tier(classname: str, name: str, index: SourceIndex,
                      allow_substring: bool = True) -> Tuple[Optional[str], Optional[Tier]]:
    """
    Find the test file for a test case.

    Tiers are tried in order and the first hit wins:
      1. "<import path>.<name>" when the index knows the classname's package
      2. "<package>.<name>" where package is the last "/" segment of classname
      3. "<name>" alone
      4. for subtests and fuzz inputs ("TestX/sub"), tiers 1-3 with "TestX"
      5. the first index key containing the name (or its parent), in index order

    The substring tier only returns a plausible match: when several keys
    contain the name, which one wins depends on the order files were indexed.

    Args:
        classname (str): The case's classname, usually the package import path.
        name (str): The case's name, possibly "Parent/sub/..." for subtests.
        index (SourceIndex): Index built by find_tests.build_index.
        allow_substring (bool): Whether to fall back to substring search.

    Returns:
        tuple: (relative file path, Tier) or (None, None) when nothing matched.
    """
    package = package_name(classname)
    parent = parent_test_name(name)

    candidates = [(name, Tier.IMPORT_PATH, Tier.PACKAGE, Tier.NAME)]
    if parent is not None:
        candidates.append((parent, Tier.IMPORT_PATH, Tier.PARENT_PACKAGE, Tier.PARENT_NAME))

    for test_name, import_tier, package_tier, name_tier in candidates:
        if classname:
            file = index.qualified.get(f"{classname}.{test_name}")
            if file:
                return file, import_tier

        if package:
            file = index.get(f"{package}.{test_name}")
            if file:
                return file, package_tier

        file = index.get(test_name)
        if file:
            return file, name_tier

    if allow_substring:
        for search_name in [name, parent]:
            if not search_name:
                continue
            for key, file in index.items():
                if search_name in key:
                    return file, Tier.SUBSTRING

    return None, None


def resolve(classname: str, name: str, index: SourceIndex, allow_substring: bool = True) -> Optional[str]:
    """Return the test file for a test case, or None. See resolve_with_tier."""
    file, _ = resolve_with_tier(classname, name, index, allow_substring)
    return file


def is_synthetic_case(case) -> bool:
    """Check for the package-wide TestMain entry, which is not a real test result."""
    return case.classname == "" and case.name == RESERVED_ENTRY_POINT


def is_degenerate_suite(suite) -> bool:
    """Check for the unnamed, empty placeholder suite."""
    return suite.tests == 0 and suite.name == ""


def enhance_report(report: JUnitTestSuites, index: SourceIndex, allow_substring: bool = True,
                   logger: Optional[logging.Logger] = None) -> EnhancementResult:
    """
    Add file attributes to the cases of a report, in place.

    Degenerate suites and synthetic TestMain cases are removed first and are
    not counted. Cases that already have a file are counted as matched and
    left untouched, so running twice gives the same report.

    Args:
        report (JUnitTestSuites): Decoded report; modified in place.
        index (SourceIndex): Index built by find_tests.build_index. Not modified.
        allow_substring (bool): Whether the resolver may fall back to substring search.
        logger (logging.Logger, optional): Logger instance.

    Returns:
        EnhancementResult: The report plus matched/total counts and per-case results.
    """
    logger = logger or logging.getLogger(LOGGER_NAME)
    result = EnhancementResult(report=report)

    for suite in report.suites:
        if is_degenerate_suite(suite):
            logger.info(f"Dropping empty unnamed test suite with {len(suite.cases)} test cases")
            report.remove_suite(suite)
            result.dropped_suites += 1

    for suite in report.suites:
        for case in suite.cases:
            if is_synthetic_case(case):
                failure = case.failure
                if failure is not None:
                    logger.error(f"{RESERVED_ENTRY_POINT} failed in suite {suite.name}: {failure.message}")
                    if failure.contents:
                        logger.debug(f"{RESERVED_ENTRY_POINT} output for suite {suite.name}:\n{failure.contents}")
                else:
                    logger.info(f"Dropping {RESERVED_ENTRY_POINT} entry from suite {suite.name}")
                suite.remove_case(case)
                result.dropped_cases += 1
                continue

            result.total += 1

            if case.file:
                result.matched += 1
                logger.debug(f"File already set for test {case.name}: {case.file}")
                result.results.append(MatchResult(
                    suite.name, case.classname, case.name, MatchStatus.ALREADY_SET, case.file))
                continue

            file, tier = resolve_with_tier(case.classname, case.name, index, allow_substring)
            if file:
                case.file = file
                result.matched += 1
                logger.debug(f"Matched: {case.name} -> {file} ({tier.value})")
                result.results.append(MatchResult(
                    suite.name, case.classname, case.name, MatchStatus.RESOLVED, file, tier))
            else:
                logger.warning(f"Could not find file for test {case.name} in class {case.classname}")
                result.results.append(MatchResult(
                    suite.name, case.classname, case.name, MatchStatus.UNRESOLVED))

    return result
