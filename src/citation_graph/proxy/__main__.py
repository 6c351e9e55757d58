"""Entry point for running the proxy as a module."""

from . import main

if __name__ == "__main__":
    main()
