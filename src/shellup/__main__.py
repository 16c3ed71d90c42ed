"""Allow ``python -m shellup``."""

from shellup.cli import main

if __name__ == "__main__":
    main()
