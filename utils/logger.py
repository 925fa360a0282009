"""
Logger utility for JUnit Enhancer.
"""

import logging
import os
import sys
from pathlib import Path

LOGGER_NAME = "junit_enhancer"


def is_running_in_github_actions() -> bool:
    """Detect whether the process runs inside a GitHub Actions job."""
    if os.environ.get("GITHUB_ACTIONS") == "true":
        return True
    # CI is also set by other providers, so require a workflow name too
    return os.environ.get("CI") == "true" and bool(os.environ.get("GITHUB_WORKFLOW"))


class GitHubActionsFormatter(logging.Formatter):
    """Prefix records with workflow commands on GitHub Actions, plain labels elsewhere.

    INFO records are emitted as-is.
    """

    WORKFLOW_COMMANDS = {
        logging.DEBUG: "::debug::",
        logging.WARNING: "::warning::",
        logging.ERROR: "::error::",
        logging.CRITICAL: "::error::",
    }
    LABELS = {
        logging.DEBUG: "Debug: ",
        logging.WARNING: "Warning: ",
        logging.ERROR: "Error: ",
        logging.CRITICAL: "Error: ",
    }

    def __init__(self, github_actions=None):
        super().__init__('%(message)s')
        if github_actions is None:
            github_actions = is_running_in_github_actions()
        self.github_actions = github_actions

    def format(self, record):
        message = super().format(record)
        prefixes = self.WORKFLOW_COMMANDS if self.github_actions else self.LABELS
        return prefixes.get(record.levelno, "") + message


class _InfoFilter(logging.Filter):
    """Pass only INFO records, or everything except INFO records."""

    def __init__(self, only_info):
        super().__init__()
        self.only_info = only_info

    def filter(self, record):
        return (record.levelno == logging.INFO) == self.only_info


def setup_logger(log_file=None, verbose=False):
    """
    Set up and configure the logger.

    INFO messages go to stdout; debug output, warnings and errors go to stderr.
    Verbose mode is switched on automatically when GitHub Actions runs the job
    with debug logging enabled (RUNNER_DEBUG=1).

    Args:
        log_file (str, optional): Path to the log file. If None, logs to console only.
        verbose (bool, optional): Whether to enable debug logging. Defaults to False.

    Returns:
        logging.Logger: Configured logger instance.
    """
    github_actions = is_running_in_github_actions()
    if github_actions and os.environ.get("RUNNER_DEBUG") == "1":
        verbose = True

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Remove any existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = GitHubActionsFormatter(github_actions)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_InfoFilter(only_info=True))
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.addFilter(_InfoFilter(only_info=False))
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)

    # Create file handler if log_file is provided
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        file_handler.setFormatter(logging.Formatter('%(levelname)s %(message)s'))
        logger.addHandler(file_handler)

    return logger
