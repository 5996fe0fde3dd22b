# usermigrate Output Module
# Rich console output

from usermigrate.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
