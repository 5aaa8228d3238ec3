# utils/_timer.py
"""Context manager for timing and logging blocks of code."""

__all__ = [
    "TimedBlock",
]

import os
import time
import logging
import collections


class TimedBlock:
    r"""Context manager for timing a block of code and reporting the timing.

    Elapsed times are also accumulated per ``category`` in the class-level
    dictionary :attr:`TimedBlock.totals`, which gives a breakdown of where
    an adaptive sweep spends its time (full-order solves, projections,
    reduced-order solves, ...).

    Parameters
    ----------
    message : str
        Message to log / print.
    category : str or None
        Label under which the elapsed time is accumulated.
        If ``None`` (default), use ``message``.

    Examples
    --------
    >>> import time
    >>> import adaptprom

    Messages are only logged by default; also print them to the screen.

    >>> adaptprom.utils.TimedBlock.verbose = True
    >>> with adaptprom.utils.TimedBlock("HDM solve", category="solve"):
    ...     time.sleep(2)
    HDM solve...done in 2.00 s.

    Set up a logfile to record messages to.

    >>> adaptprom.utils.TimedBlock.add_logfile("log.log")
    Logging to '/path/to/current/folder/log.log'

    Turn off print statements (but keep logging).

    >>> adaptprom.utils.TimedBlock.verbose = False
    >>> with adaptprom.utils.TimedBlock("not printed", category="solve"):
    ...     time.sleep(1)
    >>> adaptprom.utils.TimedBlock.totals["solve"]
    3.003128528594971

    Capture the time elapsed for later use.

    >>> with adaptprom.utils.TimedBlock("how long?") as timer:
    ...     time.sleep(2)
    >>> timer.elapsed
    2.002866268157959
    """

    verbose = False
    totals = collections.defaultdict(float)
    formatter = logging.Formatter(
        fmt="%(asctime)s  %(levelname)s:\t%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    def __init__(self, message: str = "Running code block", category=None):
        """Store print/log message."""
        self.message = message.rstrip()
        self.__category = self.message if category is None else category
        self.__elapsed = None

    @property
    def category(self) -> str:
        """Label under which the elapsed time is accumulated."""
        return self.__category

    @property
    def elapsed(self):
        """Actual time (in seconds) the block took to complete."""
        return self.__elapsed

    def __enter__(self):
        """Print the message and record the current time."""
        if self.verbose:
            print(f"{self.message}...", end="", flush=True)
        self._tic = time.time()
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        """Calculate, accumulate, and report the elapsed time."""
        elapsed = time.time() - self._tic
        self.__elapsed = elapsed
        TimedBlock.totals[self.category] += elapsed
        if exc_type:
            if self.verbose:
                print(f"{exc_type.__name__}: {exc_value}")
            logging.error(
                f"{self.message}: ({exc_type.__name__}) {exc_value} "
                f"(raised after {elapsed:.6f} s)"
            )
            return False
        if self.verbose:
            print(f"done in {elapsed:.2f} s.", flush=True)
        logging.info(f"{self.message}...done in {elapsed:.6f} s.")
        return False

    @classmethod
    def reset(cls):
        """Clear the accumulated timings."""
        cls.totals.clear()

    @classmethod
    def report(cls) -> str:
        """Summary of the accumulated timings, one category per line."""
        width = max([len(key) for key in cls.totals] + [8])
        lines = [
            f"{key:<{width}}  {value:.6f} s"
            for key, value in sorted(cls.totals.items())
        ]
        return "\n".join(lines)

    @classmethod
    def add_logfile(cls, logfile: str = "log.log") -> None:
        """Instruct :class:`TimedBlock` to log messages to the ``logfile``.

        Parameters
        ----------
        logfile : str
            File to log to.
        """
        logger = logging.getLogger()
        logpath = os.path.abspath(logfile)

        # Check that we aren't already logging to this file.
        for handler in logger.handlers:
            if (
                isinstance(handler, logging.FileHandler)
                and os.path.abspath(handler.baseFilename) == logpath
            ):
                if cls.verbose:
                    print(f"Already logging to {logpath}")
                return

        # Add a new handler for this file.
        newhandler = logging.FileHandler(logpath, "a")
        newhandler.setFormatter(cls.formatter)
        newhandler.setLevel(logging.INFO)
        logger.setLevel(logging.INFO)
        logger.addHandler(newhandler)
        if cls.verbose:
            print(f"Logging to '{logpath}'")
