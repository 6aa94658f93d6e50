"""Start the Vibe Notes CLI. Equivalent to ``python -m cli``."""

from cli.client import main

if __name__ == "__main__":
    main()
