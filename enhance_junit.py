#!/usr/bin/env python3
"""
Add source file paths to the test cases of a Go JUnit XML report.

Reads a JUnit XML file produced by gotestsum, indexes the *_test.go files of
the repository, fills in the "file" attribute of every test case it can match
and writes the report back.

Usage:
    python enhance_junit.py --input junit.xml [--output enhanced.xml] [--repo-root .] [--verbose]

Options:
    --input FILE             JUnit XML file to enhance (required)
    --output FILE            Output file (default: overwrite the input file)
    --repo-root DIR          Repository root; file paths are relative to it (default: .)
    --verbose                Enable debug logging
    --exclude-dir NAME       Additional directory name to skip while indexing (repeatable)
    --no-substring-fallback  Leave cases unmatched instead of guessing by substring
    --fail-on-unmatched      Exit with status 2 if any test case could not be matched
    --log-file FILE          Also write the log to FILE
    --progress               Show a progress bar while indexing
"""

import argparse
import sys
import traceback

from find_tests import DEFAULT_EXCLUDED_DIRS, IndexBuildError, build_index
from junit_report import ReportError, read_junit_file, write_junit_file
from map_test_files import enhance_report
from utils.logger import setup_logger

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_UNMATCHED = 2


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Add test file paths to a Go JUnit XML report.'
    )

    parser.add_argument(
        '--input',
        type=str,
        required=True,
        help='Path to JUnit XML file'
    )
    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Path to output JUnit XML file (defaults to input file)'
    )
    parser.add_argument(
        '--repo-root',
        type=str,
        default='.',
        help='Path to repository root (default: .)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output for debugging'
    )
    parser.add_argument(
        '--exclude-dir',
        action='append',
        default=[],
        metavar='NAME',
        help=f"Directory name to skip while indexing, in addition to {', '.join(DEFAULT_EXCLUDED_DIRS)}"
    )
    parser.add_argument(
        '--no-substring-fallback',
        action='store_true',
        help='Do not guess files by substring search when no exact key matches'
    )
    parser.add_argument(
        '--fail-on-unmatched',
        action='store_true',
        help=f'Exit with status {EXIT_UNMATCHED} if any test case could not be matched'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write log messages to this file'
    )
    parser.add_argument(
        '--progress',
        action='store_true',
        help='Show a progress bar while indexing test files'
    )

    return parser.parse_args(argv)


def enhance_junit_file(args: argparse.Namespace, logger) -> int:
    """
    Enhance the report named by the command line arguments.

    Args:
        args: Command line arguments
        logger (logging.Logger): Logger instance

    Returns:
        int: Exit status
    """
    output_file = args.output or args.input

    report = read_junit_file(args.input)

    exclude_dirs = list(DEFAULT_EXCLUDED_DIRS) + args.exclude_dir
    index = build_index(args.repo_root, exclude_dirs=exclude_dirs,
                        show_progress=args.progress, logger=logger)

    logger.debug(f"Built test map with {len(index)} entries")
    logger.debug("Sample entries:")
    for key, file in index.items():
        logger.debug(f"  {key} -> {file}")
    if index.parse_failures:
        logger.debug(f"Skipped {len(index.parse_failures)} unparsable test files")

    result = enhance_report(report, index, allow_substring=not args.no_substring_fallback, logger=logger)

    write_junit_file(result.report, output_file)

    logger.info(
        f"Successfully enhanced JUnit XML file: {output_file} "
        f"({result.matched}/{result.total} test cases matched)"
    )

    if args.fail_on_unmatched and result.unmatched:
        logger.error(f"{result.unmatched} test cases could not be matched to a file")
        return EXIT_UNMATCHED
    return EXIT_OK


def main(argv=None):
    """Main entry point for the program."""
    args = parse_arguments(argv)
    logger = setup_logger(log_file=args.log_file, verbose=args.verbose)

    try:
        return enhance_junit_file(args, logger)
    except (ReportError, IndexBuildError) as e:
        logger.error(str(e))
        return EXIT_FATAL
    except KeyboardInterrupt:
        logger.error("Operation interrupted by user")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            traceback.print_exc()
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
