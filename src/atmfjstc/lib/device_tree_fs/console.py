"""
Console abstraction for the messages the command-line tools show to the user (as opposed to their proper output).

Warnings and errors are sent to stderr, highlighted in color where the terminal supports it. Log records can be routed
to the console as well, so that diagnostics from the library show up the same way::

    from [...].console import console, init_console_logging

    init_console_logging()
    console.print_warning("test")

Notes:

- The proper output of a program (e.g. a dump of the tree) should be printed normally, not via the console.
- Most methods return the console object itself, to allow for chaining.
"""

import sys
import logging
import traceback

from typing import Optional, Tuple, TextIO, Callable
from textwrap import indent
from functools import wraps
from termcolor import cprint


class Console:
    """
    An abstraction for showing messages to the user via the terminal.

    Don't create your own instances of this.
    """

    def print_info(self, message: str) -> 'Console':
        return self.print_message('info', message)

    def print_warning(self, message: str) -> 'Console':
        """
        Print a warning message. It will be highlighted in yellow and sent to stderr.
        """
        return self.print_message('warning', message)

    def print_error(self, message: str) -> 'Console':
        """
        Print an error message. It will be highlighted in red and sent to stderr.
        """
        return self.print_message('error', message)

    def print_message(self, kind: str, message: str) -> 'Console':
        """
        Prints a message of a programmatically specified type.

        Args:
            kind: Can be 'info', 'warning' or 'error', with the meanings as described by the respective `print_*`
                methods. Any other kind is printed like 'info'.
            message: The message to print. Can be multiline.

        Returns:
            The console object (to enable a fluent interface)
        """
        props = _PROPS_BY_MSG_TYPE.get(kind, _PROPS_BY_MSG_TYPE['default'])

        channel = sys.stderr if props.get('channel') == 'stderr' else sys.stdout

        _print_maybe_with_color(message, props.get('color'), props.get('attrs', ()), channel)

        return self


def _print_maybe_with_color(text: str, color: Optional[str], attrs: Tuple[str, ...], channel: TextIO):
    if (color is None) and (len(attrs) == 0):
        print(text, file=channel)
    else:
        cprint(text, color, attrs=list(attrs), file=channel)


_PROPS_BY_MSG_TYPE = {
    'default': dict(),
    'info': dict(),
    'warning': dict(color='yellow', attrs=('bold',), channel='stderr'),
    'error': dict(color='red', attrs=('bold',), channel='stderr'),
}


# Singleton
console = Console()
"""The currently active console abstraction."""


class ConsoleLogHandler(logging.Handler):
    """
    Logging handler that shows records on the console: errors (and worse) as errors, warnings as warnings, and
    anything else as info.
    """

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return

        if record.levelno >= logging.ERROR:
            console.print_error(message)
        elif record.levelno >= logging.WARNING:
            console.print_warning(message)
        else:
            console.print_info(message)


def init_console_logging(level: int = logging.WARNING) -> ConsoleLogHandler:
    """
    Routes all logging through the console, showing just the message for each record.

    Returns:
        The installed handler, so that it can be removed later if needed.
    """
    handler = ConsoleLogHandler()
    handler.setFormatter(logging.Formatter('{message}', style='{'))

    logging.root.addHandler(handler)
    logging.root.setLevel(level)

    return handler


def pretty_unhandled(main_method: Callable) -> Callable:
    """
    Decorator for a main function that causes unhandled exceptions to be displayed on the console in a readable way,
    after which the program exits with status -1. A `KeyboardInterrupt` just shows a short message.
    """

    @wraps(main_method)
    def wrapper(*args, **kwargs):
        try:
            return main_method(*args, **kwargs)
        except SystemExit:
            raise
        except KeyboardInterrupt:
            console.print_warning("Stopped by user")
            sys.exit(0)
        except BaseException as e:
            console.print_error(''.join(traceback.format_exception_only(e.__class__, e)).rstrip())
            console.print_error("Traceback:")
            console.print_error(indent(''.join(traceback.format_tb(e.__traceback__)).rstrip(), '  '))

        sys.exit(-1)

    return wrapper
