"""ntfsmft CLI layer."""

__all__ = ["cli"]


def cli() -> None:
    """Lazy import and run the CLI."""
    from ntfsmft.cli.main import main

    main()
