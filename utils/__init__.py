"""
Utility modules for JUnit Enhancer.
"""

from .logger import (
    LOGGER_NAME,
    GitHubActionsFormatter,
    is_running_in_github_actions,
    setup_logger,
)

__all__ = [
    'LOGGER_NAME',
    'GitHubActionsFormatter',
    'is_running_in_github_actions',
    'setup_logger',
]
