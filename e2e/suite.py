"""
Phase execution helpers.

A phase is a module exposing sections of (name, test_fn) pairs. Results are
printed as pass/fail lines followed by a summary the master runner scrapes:

    Total Tests: 18
    Passed: 17
    Failed: 1
"""

import argparse
import unittest
from datetime import datetime

from .conftest import (
    Colors, get_api_base, log_fail, log_pass, log_section, log_skip, set_api_base,
)


class SkipTest(unittest.SkipTest):
    """Raised by a test that cannot run in the current environment.

    Subclasses unittest.SkipTest so pytest reports it as a skip as well.
    """


def run_test_module(module_name, tests):
    """Run a list of tests and return (passed, failed, skipped) counts."""
    log_section(module_name)

    passed = 0
    failed = 0
    skipped = 0

    for name, test_fn in tests:
        try:
            test_fn()
            log_pass(name)
            passed += 1
        except SkipTest as e:
            log_skip(name, str(e))
            skipped += 1
        except AssertionError as e:
            log_fail(name, str(e))
            failed += 1
        except Exception as e:
            log_fail(name, f"{type(e).__name__}: {e}")
            failed += 1

    return passed, failed, skipped


def success_rate(passed, total):
    return (passed / total) * 100 if total > 0 else 0.0


def print_summary(title, passed, failed, skipped=0):
    """Print the final block of a phase."""
    total = passed + failed
    rate = success_rate(passed, total)
    rate_color = Colors.GREEN if rate >= 80 else Colors.YELLOW

    print(f"\n{Colors.BLUE}{'=' * 80}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}🏁 {title}{Colors.END}")
    print(f"{Colors.BLUE}{'=' * 80}{Colors.END}")
    print(f"Total Tests: {total}")
    print(f"{Colors.GREEN}Passed: {passed}{Colors.END}")
    print(f"{Colors.RED}Failed: {failed}{Colors.END}")
    if skipped:
        print(f"{Colors.YELLOW}Skipped: {skipped}{Colors.END}")
    print(f"{rate_color}Success Rate: {rate:.2f}%{Colors.END}")

    if failed == 0:
        print(f"\n{Colors.GREEN}🎉 All tests passed!{Colors.END}")
    else:
        print(f"\n{Colors.YELLOW}⚠️  Some tests failed. Check the details above.{Colors.END}")


def build_parser(description, flags=()):
    """Argument parser shared by all phase scripts."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--base-url", help="Override TEST_BASE_URL for this run")
    for flag, help_text in flags:
        parser.add_argument(flag, action="store_true", help=help_text)
    return parser


def run_phase(title, sections):
    """Run every section and print the summary. Returns the process exit status."""
    print(f"\n{Colors.BOLD}{Colors.BLUE}🚀 {title}{Colors.END}")
    print(f"{Colors.CYAN}🌐 Target URL: {get_api_base()}{Colors.END}")
    print(f"{Colors.CYAN}   Timestamp: {datetime.now().isoformat()}{Colors.END}")

    total_passed = 0
    total_failed = 0
    total_skipped = 0

    for section_name, tests in sections:
        passed, failed, skipped = run_test_module(section_name, tests)
        total_passed += passed
        total_failed += failed
        total_skipped += skipped

    print_summary(f"TEST SUMMARY - {title}", total_passed, total_failed, total_skipped)
    return 0 if total_failed == 0 else 1


def phase_main(title, get_sections, flags=(), argv=None):
    """
    Entry point of a phase script.

    `get_sections(args)` returns [(section_name, [(test_name, fn), ...]), ...].
    """
    parser = build_parser(title, flags)
    args = parser.parse_args(argv)
    if args.base_url:
        set_api_base(args.base_url)
    return run_phase(title, get_sections(args))
