"""Allow ``python -m src.cli`` as a shortcut for ``python -m src.cli.discover``."""

from src.cli.discover import main

main()
