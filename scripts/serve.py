#!/usr/bin/env python
"""
Run the pricing API (FastAPI via uvicorn) or the Streamlit calculator.

Usage:
    python scripts/serve.py api [--port 8000] [--data-dir DIR]
    python scripts/serve.py ui [--data-dir DIR]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the warung pricing API or UI")
    parser.add_argument("target", choices=["api", "ui"])
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--data-dir", help="Directory holding the JSON stores")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent

    # Ensure src is in python path
    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)
    if args.data_dir:
        env["WARUNG_DATA_DIR"] = str(Path(args.data_dir).resolve())

    if args.target == "api":
        cmd = [
            sys.executable, "-m", "uvicorn", "warung_pricing.api.main:app",
            "--host", args.host, "--port", str(args.port), "--reload",
        ]
    else:
        ui_path = project_root / 'src' / 'warung_pricing' / 'ui' / 'app_streamlit.py'
        cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path)]

    print(f"Starting {args.target}: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nStopped.")


if __name__ == "__main__":
    main()
