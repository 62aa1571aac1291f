"""Allow ``python -m yucabot.cli`` execution."""

from yucabot.cli import main

main()
