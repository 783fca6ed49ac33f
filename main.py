"""Main entry point for release-mirror.

Usage: python main.py <access-token>
"""

from release_mirror.cli import main

if __name__ == "__main__":
    main()
