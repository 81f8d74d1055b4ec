#!/usr/bin/env python3
"""
Simple script to start the PV financing comparison API
"""

import os
import subprocess
import sys


def main():
    project_dir = os.path.dirname(os.path.abspath(__file__))
    port = os.getenv("PVFIN_PORT", "8001")

    print("🚀 Starting PV Financing Comparator API...")
    print(f"📁 Project directory: {project_dir}")

    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "main:app",
            "--host", "0.0.0.0",
            "--port", port,
            "--reload"
        ], cwd=project_dir, check=False)
    except KeyboardInterrupt:
        print("\n👋 Shutting down API server...")


if __name__ == "__main__":
    main()
