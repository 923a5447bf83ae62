"""Module entrypoint for ``python -m vulcan_api`` CLI usage."""

from vulcan_api.cli import main

if __name__ == "__main__":
    main()
