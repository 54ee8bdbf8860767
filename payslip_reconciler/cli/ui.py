"""
CLI Entry Point: payslip-reconcile-ui

Launches the Streamlit reconciliation page. `--workspace` is handed to the
page as a script argument; every other option goes to `streamlit run`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from streamlit.web import cli as stcli

APP_PATH = Path(__file__).resolve().parent.parent / "ui" / "app.py"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Open the payslip reconciliation page.")
    parser.add_argument("--workspace", type=Path, default=None, help="Workspace JSON to open.")
    return parser


def streamlit_argv(app_path: Path, argv: List[str]) -> List[str]:
    args, streamlit_args = build_parser().parse_known_args(argv)
    command = ["streamlit", "run", str(app_path), *streamlit_args]
    if args.workspace is not None:
        command += ["--", "--workspace", str(args.workspace.resolve())]
    return command


def main(argv: Optional[List[str]] = None) -> None:
    if not APP_PATH.exists():
        sys.exit(f"Error: Could not find UI entry point at {APP_PATH}")
    sys.argv = streamlit_argv(APP_PATH, sys.argv[1:] if argv is None else argv)
    sys.exit(stcli.main())


if __name__ == "__main__":
    main()
