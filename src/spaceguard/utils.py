"""
Shared helpers: solver warnings, validation policy and a wall-clock timer.
"""

from time import perf_counter
import warnings
from typing import Type
from .config import config


class ConvergenceWarning(RuntimeWarning):
    """Issued when an iterative solver stops at its iteration cap."""


class Timer:
    """
    Wall-clock timer for a block of solver work.

    On exit the elapsed time is stored in ``elapsed``. It is reported to
    ``logger`` at DEBUG level when one is given, otherwise printed when
    ``verbose`` is set.

    Examples
    --------
    >>> from spaceguard.utils import Timer
    >>> with Timer("Revolution search"):
    ...     solution = get_transfer_orbit(earth, asteroid, 1280, 500)
    Revolution search: 0.012345 s

    >>> with Timer(verbose=False) as t:
    ...     orbit.step(365.25)
    >>> t.elapsed < 1.0
    True
    """
    def __init__(self, name="Operation", verbose=True, logger=None):
        self.name = name
        self.verbose = verbose
        self.logger = logger
        self.elapsed = None
        self._start = None

    def __enter__(self):
        self._start = perf_counter()
        return self

    def __exit__(self, *exc):
        self.elapsed = perf_counter() - self._start
        if self.logger is not None:
            self.logger.debug("%s: %.6f s", self.name, self.elapsed)
        elif self.verbose:
            print(f"{self.name}: {self.elapsed:.6f} s")
        return False


def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Reject invalid orbital input according to config.STRICT_VALIDATION.

    Strict mode (the default) raises ``error_class``. Otherwise a
    UserWarning is issued and the caller carries on with the value.

    Parameters
    ----------
    message : str
        What was wrong with the input
    error_class : Type[Exception], optional
        Exception raised in strict mode. Default: ValueError

    Examples
    --------
    >>> from spaceguard.utils import validation_error
    >>> from spaceguard import temp_config
    >>> validation_error("Eccentricity must be in [0, 1)")  # Raises ValueError
    >>> with temp_config(STRICT_VALIDATION=False):
    ...     validation_error("Eccentricity must be in [0, 1)")  # Warns
    """
    if config.STRICT_VALIDATION:
        raise error_class(message)
    warnings.warn(message, UserWarning, stacklevel=3)


def convergence_warning(message: str):
    """Issue a ConvergenceWarning pointing at the caller of the solver."""
    warnings.warn(message, ConvergenceWarning, stacklevel=3)
