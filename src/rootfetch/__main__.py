"""Main entry point for rootfetch."""

from rootfetch.cli.main import main


if __name__ == "__main__":
    main()
