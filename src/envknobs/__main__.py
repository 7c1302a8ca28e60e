"""Allow ``python -m envknobs``."""

from .cli import main

main()
