"""Helper functions used across the codebase."""
from attrs import define, field
from rich.console import Console
from rich.markup import escape

CONSOLE = Console(stderr=True)


@define(frozen=True)
class Logger:
    """Prints timestamped messages to a console.

    An instance is passed to every component so that the output can be
    redirected (i.e. captured by a recording console in tests). The console
    is thread-safe, so the same logger can be shared across worker threads.

    Arguments:
        console: the console where messages are printed.
    """

    console: Console = field(default=CONSOLE)

    def log(self, message: str):
        """Prints a message with contextual information (i.e. timestamp).

        Arguments:
            message: informational message to print.
        """
        self.console.log(escape(message), _stack_offset=2)

    def success(self, message: str):
        """Prints a message reporting a completed operation.

        Arguments:
            message: message to print.
        """
        self.console.log(f"[green]{escape(message)}[/]", _stack_offset=2)

    def error(self, message: str):
        """Prints an error message.

        Arguments:
            message: error message to print.
        """
        self.console.log(f"[bold red]ERROR[/] [red]{escape(message)}[/]", _stack_offset=2)

    def exception(self, message: str):
        """Prints an error message including the traceback of the exception
        being handled.

        Arguments:
            message: error message to print.
        """
        self.console.log(f"[bold red]ERROR[/] [red]{escape(message)}[/]", _stack_offset=2)
        self.console.print_exception()
