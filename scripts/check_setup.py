#!/usr/bin/env python3
"""
Setup validation script for the Revenue Statement Parser.

Checks all system requirements and provides guidance for missing components.
"""

import os
import shutil
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))


def print_header(text: str):
    """Print a formatted header."""
    print(f"\n{'=' * 60}")
    print(f"  {text}")
    print('=' * 60)


def print_check(name: str, status: bool, message: str = ""):
    """Print a check result."""
    icon = "✅" if status else "❌"
    print(f"{icon} {name}: {message}")


def print_warning(message: str):
    """Print a warning message."""
    print(f"⚠️  {message}")


def print_info(message: str):
    """Print an info message."""
    print(f"ℹ️  {message}")


def check_python_version():
    """Check Python version."""
    print_header("Python Version")

    version = sys.version_info
    required = (3, 9)

    is_ok = version >= required
    print_check(
        "Python",
        is_ok,
        f"{version.major}.{version.minor}.{version.micro} "
        f"({'OK' if is_ok else f'requires {required[0]}.{required[1]}+'})"
    )

    return is_ok


def check_poppler():
    """Check Poppler installation (needed to render PDF pages)."""
    print_header("Poppler (PDF Rendering)")

    missing = [cmd for cmd in ("pdfinfo", "pdftoppm") if not shutil.which(cmd)]

    if not missing:
        print_check("Poppler", True, f"Found: {shutil.which('pdftoppm')}")
        return True

    print_check("Poppler", False, f"Missing: {', '.join(missing)}")
    print_info("Install with:")
    print_info("  macOS: brew install poppler")
    print_info("  Ubuntu: sudo apt install poppler-utils")
    return False


def check_python_packages():
    """Check required Python packages."""
    print_header("Python Packages")

    required_packages = [
        "streamlit",
        "PIL",  # Pillow
        "pdf2image",
        "openpyxl",
        "pydantic",
        "pandas",
        "requests",
        "tenacity",
        "dotenv",  # python-dotenv
    ]

    # Map import names to package names
    import_map = {
        "PIL": "Pillow",
        "dotenv": "python-dotenv",
    }

    all_ok = True

    for package in required_packages:
        display_name = import_map.get(package, package)
        try:
            __import__(package)
            print_check(display_name, True, "Installed")
        except ImportError:
            print_check(display_name, False, "Not installed")
            all_ok = False

    if not all_ok:
        print_info("\nInstall missing packages with:")
        print_info("  pip install -e .")

    return all_ok


def check_env_file():
    """Check the OpenAI API key, from .env or the environment."""
    print_header("Environment Configuration")

    env_file = Path(".env")
    if env_file.exists():
        print_check(".env file", True, "Found")
        from dotenv import load_dotenv
        load_dotenv()
    else:
        print_info(".env file not found; using process environment")

    if not os.getenv("OPENAI_API_KEY"):
        print_check("OpenAI API Key", False, "OPENAI_API_KEY is not set")
        print_info("Add to .env:")
        print_info("  OPENAI_API_KEY=sk-...")
        return False

    print_check("OpenAI API Key", True, "Configured")
    return True


def check_openai_connection():
    """List models with the configured key."""
    print_header("OpenAI API")

    try:
        from revenue_parser.config import load_config
        from revenue_parser.exceptions import ConfigurationError
        from revenue_parser.llm.client import VisionExtractionClient
    except ImportError as e:
        print_warning(f"Cannot import revenue_parser: {e}")
        return False

    config = load_config()
    try:
        client = VisionExtractionClient(config.openai)
    except ConfigurationError as e:
        print_check("OpenAI", False, e.user_message)
        return False

    ok, message = client.check_connection()
    print_check("OpenAI", ok, message)
    return ok


def main():
    """Run all checks."""
    print("\n" + "=" * 60)
    print("  Revenue Statement Parser - Setup Validation")
    print("=" * 60)

    results = {}

    # Run checks
    results["python"] = check_python_version()
    results["poppler"] = check_poppler()
    results["packages"] = check_python_packages()
    results["env"] = check_env_file()
    results["openai"] = check_openai_connection() if results["env"] else False

    # Summary
    print_header("Summary")

    ready = all(results.values())

    if ready:
        print("✅ System is ready to run the application!")
        print("\nStart with:")
        print("  streamlit run revenue_parser/main.py")
    else:
        print("❌ Some requirements are missing:")

        if not results["python"]:
            print("  - Python 3.9+ required")
        if not results["poppler"]:
            print("  - Poppler required to render PDF pages")
        if not results["packages"]:
            print("  - Some Python packages missing (run: pip install -e .)")
        if not results["env"]:
            print("  - OPENAI_API_KEY must be set")
        elif not results["openai"]:
            print("  - OpenAI API connection failed")

    print()
    return 0 if ready else 1


if __name__ == "__main__":
    sys.exit(main())
