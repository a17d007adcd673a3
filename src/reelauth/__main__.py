"""Entry point for 'python -m reelauth' command."""

from reelauth.cli import main

if __name__ == "__main__":
    main()
