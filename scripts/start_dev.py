#!/usr/bin/env python3
"""
Development startup script.

Starts the mock platform (port 8001) and the storefront service (port 8000)
with auto-reload. Ctrl+C stops both.
"""

import shutil
import subprocess
import sys
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent

# (app import path, port), started in order
SERVICES = [
    ("mock_platform.main:app", 8001),
    ("storefront.main:app", 8000),
]


def ensure_env_file():
    """Create config/.env from the example on first run"""
    env_file = PROJECT_ROOT / "config" / ".env"
    if not env_file.exists():
        shutil.copy(PROJECT_ROOT / "config" / ".env.example", env_file)
        print("Created config/.env from example")


def start_services():
    processes = []

    try:
        for app, port in SERVICES:
            print(f"Starting {app} on http://localhost:{port}")
            processes.append(subprocess.Popen(
                [
                    sys.executable, "-m", "uvicorn", app,
                    "--reload",
                    "--host", "0.0.0.0",
                    "--port", str(port),
                ],
                cwd=PROJECT_ROOT,
            ))
            # Let the platform come up before the storefront calls it
            time.sleep(2)

        for p in processes:
            p.wait()

    except KeyboardInterrupt:
        for p in processes:
            p.terminate()
        for p in processes:
            p.wait()


if __name__ == "__main__":
    ensure_env_file()
    start_services()
