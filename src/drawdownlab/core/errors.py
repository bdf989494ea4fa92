"""
Error classes for DrawdownLab.

This module defines the exception classes raised by the simulation engine.
Every error is raised before any state is touched, so a rejected call leaves
balances, history and pending state exactly as they were.
"""


class DrawdownError(Exception):
    """Base class for all DrawdownLab errors."""

    pass


class ConfigurationError(DrawdownError):
    """
    Invalid simulation configuration.

    **Common Causes:**
    - Allocation percentages that do not round to 100
    - Empty bucket list or duplicate bucket names
    - Negative corpus, expense or volatility
    - Unknown withdrawal mode in a configuration file

    **Example Usage:**
        ```python
        from drawdownlab.core.errors import ConfigurationError

        try:
            simulator.start()
        except ConfigurationError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class NotStartedError(DrawdownError):
    """Raised when a ledger operation is attempted before ``start()``."""

    pass


class StateConflictError(DrawdownError):
    """
    Raised when ``advance_year()`` is called while a pending year awaits a transfer.

    The pending year must be resolved through ``transfer()`` (or discarded
    with ``reset()``) before the simulation can move on.
    """

    pass


class InvalidTransferError(DrawdownError):
    """Raised for equal indices, non-positive amounts or insufficient source balance."""

    pass


class DecompositionError(DrawdownError):
    """
    Raised when a correlation matrix cannot be Cholesky-factored.

    The matrix must be square, symmetric, positive semi-definite and sized to
    the number of buckets.
    """

    pass
