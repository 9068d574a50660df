"""Module entrypoint for ``python -m editnav``.

All argument parsing and engine setup happen in ``editnav.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
