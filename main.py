"""
Entry point for the Pay Down vs Invest simulator.

Usage:
    python main.py          # launches the web app at localhost:5000
    python main.py --cli    # runs the terminal interface
"""

import argparse

import config as cfg


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Pay Down vs Invest: extra loan payments or invest the difference?",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument(
        "--pdf",
        default=cfg.REPORT_PATH,
        help="Where the CLI writes its PDF report (default: %(default)s)",
    )
    args = parser.parse_args()

    if args.cli:
        from cli import run_cli
        run_cli(args.pdf)
    else:
        from app import run_web
        run_web()


if __name__ == "__main__":
    main()
