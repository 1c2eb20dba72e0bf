"""Module entrypoint for ``python -m txtview``."""

from .cli import main


if __name__ == "__main__":
    main()
