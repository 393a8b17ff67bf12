#!/usr/bin/env python3
"""
Coverage test runner for the minefield engine
Runs the test suite with coverage and optionally opens the HTML report
"""

import argparse
import subprocess
import sys
import webbrowser
from pathlib import Path


def run_coverage(open_report: bool = False) -> bool:
    """Run tests with coverage and generate HTML report"""
    print("Running tests with coverage...")
    print("=" * 50)

    cmd = [
        sys.executable, "-m", "pytest",
        "tests/",
        "--cov=minefield",
        "--cov-report=term-missing",
        "--cov-report=html:htmlcov",
        "-v"
    ]

    try:
        result = subprocess.run(cmd, check=False)
    except FileNotFoundError:
        print("Error: Python or pytest not found")
        return False

    if result.returncode == 0:
        print("\nAll tests passed!")
    else:
        print(f"\nSome tests failed (exit code: {result.returncode})")

    html_report = Path("htmlcov/index.html")
    if html_report.exists():
        print(f"\nCoverage report generated: {html_report.absolute()}")
        if open_report:
            webbrowser.open(f"file://{html_report.absolute()}")

    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="Run the minefield tests with coverage")
    parser.add_argument("--open", action="store_true", help="open the HTML report in a browser")
    args = parser.parse_args()
    sys.exit(0 if run_coverage(args.open) else 1)


if __name__ == "__main__":
    main()
