"""Allow ``python -m src.cli`` execution."""

from src.cli.catalog import main

main()
