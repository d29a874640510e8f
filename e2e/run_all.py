#!/usr/bin/env python3
"""
Numerino E2E Master Runner

Runs every phase in phases.yaml, in order, each as its own process:
1. Health checks (required)
2. Institution setup (required)
3. User registration (required)
4. User management (optional)
5. Authentication (optional)
6. Authenticated users (optional)
7. Sessions & audit (optional)

A failing required phase stops the run. Optional phases only report.
Phases share identities through the shared test data file.

Usage:
    python -m e2e.run_all                      # Run all phases
    python -m e2e.run_all --base-url URL       # Target another backend
    python -m e2e.run_all --timeout 120000     # Per-phase timeout (ms)
    python -m e2e.run_all --cleanup            # Reset shared test data
    python -m e2e.run_all --show-data          # Print shared test data
    python -m e2e.run_all --help
"""

import argparse
import os
import re
import subprocess
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from . import conftest
from .conftest import Colors, PROJECT_ROOT
from .shared_data import get_shared_data, reset_shared_data

PHASES_FILE = Path(__file__).with_name("phases.yaml")
DEFAULT_PAUSE = 1.0


@dataclass
class Phase:
    """One entry of the phase plan."""
    name: str
    module: str
    description: str = ""
    args: List[str] = field(default_factory=list)
    required: bool = False


@dataclass
class PhaseStats:
    total: int = 0
    passed: int = 0
    failed: int = 0


@dataclass
class PhaseResult:
    phase: Phase
    exit_code: Optional[int]
    duration: float
    stats: PhaseStats = field(default_factory=PhaseStats)
    output: str = ""
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and self.error is None


def load_phases(path=PHASES_FILE) -> List[Phase]:
    """Read the phase plan from YAML."""
    with open(path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    phases = []
    for entry in config.get("phases") or []:
        phases.append(Phase(
            name=entry["name"],
            module=entry["module"],
            description=entry.get("description", ""),
            args=[str(arg) for arg in entry.get("args") or []],
            required=bool(entry.get("required", False)),
        ))
    if not phases:
        raise ValueError(f"No phases defined in {path}")
    return phases


# ============================================
# Output parsing
# ============================================

ANSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
TOTAL_RE = re.compile(r"^\s*Total Tests:\s*(\d+)", re.MULTILINE)
PASSED_RE = re.compile(r"^\s*Passed:\s*(\d+)", re.MULTILINE)
FAILED_RE = re.compile(r"^\s*Failed:\s*(\d+)", re.MULTILINE)


def _last_int(pattern, text):
    matches = pattern.findall(text)
    return int(matches[-1]) if matches else None


def parse_test_output(output: str) -> PhaseStats:
    """
    Extract pass/fail counts from a phase's output.

    Reads the `Total Tests:`, `Passed:` and `Failed:` summary lines; when a
    phase printed none, counts its ✅ / ❌ result lines instead.
    """
    text = ANSI_RE.sub("", output)

    total = _last_int(TOTAL_RE, text)
    passed = _last_int(PASSED_RE, text)
    failed = _last_int(FAILED_RE, text)

    lines = [line.strip() for line in text.splitlines()]
    if passed is None:
        passed = sum(1 for line in lines if line.startswith("✅"))
    if failed is None:
        failed = sum(1 for line in lines if line.startswith("❌"))
    if not total:
        total = passed + failed

    return PhaseStats(total=total, passed=passed, failed=failed)


# ============================================
# Phase execution
# ============================================

def phase_env(base_url: str) -> dict:
    """Environment for a phase process."""
    child_env = dict(os.environ)
    child_env["TEST_BASE_URL"] = base_url
    child_env["TEST_DATA_FILE"] = str(get_shared_data().data_file.resolve())
    child_env["PYTHONUNBUFFERED"] = "1"
    child_env["PYTHONIOENCODING"] = "utf-8"
    return child_env


def run_single_phase(phase: Phase, base_url: str, timeout_ms: int, cwd=PROJECT_ROOT) -> PhaseResult:
    """Run one phase, streaming its output while capturing it."""
    print(f"\n{Colors.BOLD}{Colors.BLUE}🔍 RUNNING: {phase.name}{Colors.END}")
    print(f"{Colors.CYAN}📄 Module: {phase.module}{Colors.END}")
    if phase.description:
        print(f"{Colors.CYAN}📝 Description: {phase.description}{Colors.END}")
    sys.stdout.flush()

    command = [sys.executable, "-m", phase.module, *phase.args]
    start = time.monotonic()
    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=str(cwd),
            env=phase_env(base_url),
        )
    except OSError as e:
        return PhaseResult(
            phase, None, time.monotonic() - start,
            error=f"Could not start {phase.name}: {e}",
        )

    timed_out = threading.Event()

    def _terminate():
        timed_out.set()
        process.terminate()

    timer = threading.Timer(timeout_ms / 1000, _terminate)
    timer.daemon = True
    timer.start()

    captured = []
    try:
        for line in process.stdout:
            sys.stdout.write(line)
            sys.stdout.flush()
            captured.append(line)
        exit_code = process.wait()
    finally:
        timer.cancel()
        process.stdout.close()

    duration = time.monotonic() - start
    output = "".join(captured)
    result = PhaseResult(phase, exit_code, duration, parse_test_output(output), output)

    if timed_out.is_set():
        result.error = f"{phase.name} timed out after {timeout_ms}ms"
        print(f"{Colors.RED}⏱️  {result.error}{Colors.END}")
    elif result.success:
        print(f"{Colors.GREEN}✅ {phase.name} completed successfully ({duration:.2f}s){Colors.END}")
    else:
        print(f"{Colors.RED}❌ {phase.name} failed with exit code {exit_code} ({duration:.2f}s){Colors.END}")
    return result


def run_phases(phases: List[Phase], base_url: str, timeout_ms: int,
               pause: float = DEFAULT_PAUSE, runner=None):
    """
    Run phases in order.

    Returns (results, aborted). A failed required phase aborts the run.
    """
    runner = runner or run_single_phase
    results = []
    for index, phase in enumerate(phases, 1):
        print(f"\n{Colors.BOLD}{Colors.YELLOW}📍 PHASE {index}/{len(phases)}{Colors.END}")
        result = runner(phase, base_url, timeout_ms)
        results.append(result)

        if not result.success:
            if result.error and not result.output:
                print(f"{Colors.RED}❌ {result.error}{Colors.END}")
            if phase.required:
                print(f"{Colors.RED}❌ Required phase {phase.name} failed, stopping{Colors.END}")
                return results, True
            print(f"{Colors.YELLOW}⚠️  Optional phase {phase.name} failed, continuing{Colors.END}")

        if index < len(phases) and pause > 0:
            time.sleep(pause)
    return results, False


def show_final_summary(results: List[PhaseResult], total_time: float) -> None:
    total = sum(r.stats.total for r in results)
    passed = sum(r.stats.passed for r in results)
    failed = sum(r.stats.failed for r in results)

    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * 80}")
    print("FINAL SUMMARY")
    print(f"{'=' * 80}{Colors.END}")

    print(f"\n{Colors.BOLD}📊 OVERALL:{Colors.END}")
    print(f"{Colors.CYAN}Tests run: {total}{Colors.END}")
    print(f"{Colors.GREEN}Tests passed: {passed}{Colors.END}")
    print(f"{Colors.RED}Tests failed: {failed}{Colors.END}")
    print(f"{Colors.YELLOW}Total time: {total_time:.2f}s{Colors.END}")

    rate = (passed / total) * 100 if total > 0 else 0.0
    if rate >= 90:
        rate_color = Colors.GREEN
    elif rate >= 70:
        rate_color = Colors.YELLOW
    else:
        rate_color = Colors.RED
    print(f"{rate_color}Success rate: {rate:.2f}%{Colors.END}")

    print(f"\n{Colors.BOLD}📋 RESULTS BY PHASE:{Colors.END}")
    for index, result in enumerate(results, 1):
        status = "✅" if result.success else "❌"
        print(f"{index}. {status} {result.phase.name} ({result.duration:.2f}s)")
        if result.stats.total > 0:
            print(f"   📊 Tests: {result.stats.total} | ✅ {result.stats.passed} | ❌ {result.stats.failed}")
        if result.error:
            print(f"   {Colors.RED}{result.error}{Colors.END}")

    # Phases wrote the file from their own processes
    reset_shared_data()
    shared = get_shared_data()
    print(f"\n{Colors.BOLD}📦 CREATED DATA:{Colors.END}")
    print(f"{Colors.CYAN}Institution ID: {shared.get_institution_id()}{Colors.END}")
    for role, data in (
        ("Teacher", shared.get_teacher_data()),
        ("Guardian", shared.get_guardian_data()),
        ("Student", shared.get_student_data()),
    ):
        if data['user_id']:
            print(f"{Colors.CYAN}{role} ID: {data['user_id']} (Profile: {data['profile_id']}){Colors.END}")

    print(f"\n{Colors.BLUE}{'=' * 80}{Colors.END}")


def exit_status(results: List[PhaseResult], aborted: bool) -> int:
    """0 only when every phase succeeded and no test failed."""
    if aborted:
        return 1
    if not all(r.success for r in results):
        return 1
    if any(r.stats.failed for r in results):
        return 1
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description="Run the Numerino E2E phases in order",
    )
    parser.add_argument("--cleanup", action="store_true",
                        help="Reset the shared test data file and exit")
    parser.add_argument("--show-data", action="store_true",
                        help="Print the shared test data and exit")
    parser.add_argument("--base-url", default=None,
                        help=f"Backend base URL (default: TEST_BASE_URL or {conftest.DEFAULT_BASE_URL})")
    parser.add_argument("--timeout", type=int, default=None,
                        help="Per-phase timeout in ms (default: TEST_TIMEOUT or 60000)")
    parser.add_argument("--pause", type=float, default=DEFAULT_PAUSE,
                        help="Seconds to wait between phases")
    parser.add_argument("--phases", default=str(PHASES_FILE),
                        help="Phase plan YAML file")
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.cleanup:
        print(f"{Colors.YELLOW}🧹 Cleaning up test data...{Colors.END}")
        get_shared_data().cleanup()
        print(f"{Colors.GREEN}✅ Test data reset{Colors.END}")
        return 0

    if args.show_data:
        get_shared_data().print_data()
        return 0

    if args.base_url:
        conftest.set_api_base(args.base_url)
    base_url = conftest.get_api_base()
    timeout_ms = args.timeout or conftest.PHASE_TIMEOUT_MS
    phases = load_phases(args.phases)

    print(f"{Colors.BOLD}{Colors.BLUE}🚀 STARTING FULL TEST SEQUENCE{Colors.END}")
    print(f"{Colors.CYAN}🌐 Target URL: {base_url}{Colors.END}")
    print(f"{Colors.CYAN}🏢 Base institution ID: {get_shared_data().get_institution_id()}{Colors.END}")

    run_id = get_shared_data().initialize_test_run()
    print(f"{Colors.CYAN}🆔 Test Run ID: {run_id}{Colors.END}")

    start = time.monotonic()
    results, aborted = run_phases(phases, base_url, timeout_ms, pause=args.pause)
    show_final_summary(results, time.monotonic() - start)

    status = exit_status(results, aborted)
    if status == 0:
        print(f"\n{Colors.GREEN}🎉 All phases completed successfully!{Colors.END}")
    elif aborted:
        print(f"\n{Colors.RED}❌ Test sequence aborted{Colors.END}")
    else:
        print(f"\n{Colors.YELLOW}⚠️  Test sequence completed with failures{Colors.END}")
    return status


if __name__ == "__main__":
    sys.exit(main())
