"""Entry point for running realm-auth as a module."""

from .server import main

if __name__ == "__main__":
    main()
