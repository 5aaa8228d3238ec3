# utils/_repr.py
"""String representation helpers."""

__all__ = [
    "str2repr",
    "complex2str",
]


def str2repr(obj) -> str:
    """Canonical string representation for objects with a ``__str__()``
    method: a unique identifier followed by ``str(obj)``.
    """
    uniqueID = f"<{obj.__class__.__name__} object at {hex(id(obj))}>"
    return f"{uniqueID}\n{str(obj)}"


def complex2str(value: complex, fmt: str = ".6e") -> str:
    """Format a complex number as ``a+bi`` for log messages."""
    value = complex(value)
    return f"{value.real:{fmt}}{value.imag:+{fmt}}i"
