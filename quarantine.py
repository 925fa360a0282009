"""
Mark pytest tests as quarantined (known flaky or known to time out).

Quarantined tests are skipped unless the RUN_QUARANTINED_TESTS environment
variable is set to "true". Either way the ticket is recorded as a user
property, which pytest writes to its JUnit XML report as a <property>.

Example:

    def test_reconnect(request):
        quarantine.flaky(request, "TEST-123")
        ...
"""

import logging
import os

import pytest

RUN_QUARANTINED_TESTS_ENV_VAR = "RUN_QUARANTINED_TESTS"
CLASSIFIED_BY = "Classified by junit-enhancer quarantine"

logger = logging.getLogger("junit_enhancer.quarantine")


def record_attribute(request, key, value):
    """Attach a key/value attribute to the running test."""
    if any(ch.isspace() for ch in key):
        raise ValueError(f"disallowed whitespace in attribute key {key!r}")
    if "\r" in value or "\n" in value:
        raise ValueError(f"disallowed newline in attribute value {value!r}")
    request.node.user_properties.append((key, value))
    logger.info(f"=== ATTR  {request.node.nodeid} {key} {value}")


def should_run_quarantined() -> bool:
    return os.environ.get(RUN_QUARANTINED_TESTS_ENV_VAR) == "true"


def _quarantine(request, attribute, description, ticket):
    record_attribute(request, attribute, ticket)
    explanation = f"{description}. Ticket {ticket}"

    if not should_run_quarantined():
        pytest.skip(
            f"Skipping {explanation}. To run quarantined tests, set the "
            f"{RUN_QUARANTINED_TESTS_ENV_VAR} environment variable to true.\n{CLASSIFIED_BY}"
        )

    logger.info(f"Running {explanation}")

    def _still_ran():
        logger.info(
            f"Test is marked as quarantined, but still ran. {explanation}. To skip quarantined "
            f"tests, ensure the {RUN_QUARANTINED_TESTS_ENV_VAR} environment variable is set to "
            f"false.\n{CLASSIFIED_BY}"
        )

    request.addfinalizer(_still_ran)


def flaky(request, ticket):
    """Mark the running test as a known flaky test tracked by ticket."""
    _quarantine(request, "flaky_test", "known flaky test", ticket)


def expected_timeout(request, ticket):
    """Mark the running test as known to time out, tracked by ticket."""
    _quarantine(request, "timeout_test", "known timeout test", ticket)
