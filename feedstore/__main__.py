"""Main entry point when executing feedstore as a package.

This allows running the package using python -m feedstore.
"""

from feedstore.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
