"""Main entry point for `python -m acme_companion`."""

from acme_companion.cli.main import main


if __name__ == "__main__":
    main()
