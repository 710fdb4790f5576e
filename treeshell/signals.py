# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines flow control signals used internally by the Treeshell CLI framework.

All signals inherit from `FlowSignal`, which is a subclass of `BaseException`
to ensure they bypass standard `except Exception` blocks.
"""


class FlowSignal(BaseException):
    """Base class for all flow control signals in Treeshell.

    These are not errors. They're used to control flow like quitting
    the interactive shell from inside a command.
    """


class QuitSignal(FlowSignal):
    """Raised to signal an immediate exit from the shell loop."""

    def __init__(self, message: str = "Quit signal received."):
        super().__init__(message)
