#!/usr/bin/env python3
"""
Simple startup script for the Ontology Manager API.
"""
import sys
import subprocess
from pathlib import Path

def main():
    """Start the Ontology Manager API server."""
    # Check if virtual environment is activated
    if not hasattr(sys, 'real_prefix') and not (hasattr(sys, 'base_prefix') and sys.base_prefix != sys.prefix):
        print("⚠️  Virtual environment not detected. Please activate your virtual environment first:")
        print("   source venv/bin/activate  # On Linux/Mac")
        print("   venv\\Scripts\\activate     # On Windows")
        sys.exit(1)

    if not Path('.env').exists():
        print("ℹ️  .env file not found, using default settings (local SQLite database).")

    # Check if requirements are installed
    try:
        import fastapi  # noqa: F401
        import uvicorn  # noqa: F401
    except ImportError:
        print("⚠️  Required packages not installed. Please install the project:")
        print("   pip install -e .")
        sys.exit(1)

    print("🚀 Starting Ontology Manager API server...")
    print("📖 API documentation will be available at: http://localhost:8000/docs")

    cmd = [
        sys.executable, "-m", "uvicorn",
        "ontology_manager.main:app",
        "--host", "0.0.0.0",
        "--port", "8000",
        "--reload"
    ]

    try:
        subprocess.run(cmd)
    except KeyboardInterrupt:
        print("\n👋 Shutting down Ontology Manager API server...")

if __name__ == "__main__":
    main()
