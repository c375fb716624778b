"""todotree main entry point."""

from todotree.cli import app


def main():
    """Main entry point for the todotree CLI."""
    app()


if __name__ == "__main__":
    main()
