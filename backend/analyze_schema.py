"""Run an exact source schema analysis from a checkout without installing.

Writes the audit JSON and the migration script to OUTPUT_DIR.
"""
import os
import sys

# Ensure project root is on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), ".")))

from ddlsync.main import analyze_main  # noqa: E402

if __name__ == "__main__":
    sys.exit(analyze_main())
