"""Thin shim for IDEs and direct execution."""

from news_digest.cli import main

if __name__ == "__main__":
    import sys

    # Default to debug logging unless the caller picked a level.
    if not any(arg.startswith("--log-level") for arg in sys.argv):
        sys.argv[1:1] = ["--log-level", "DEBUG"]

    sys.exit(main())
