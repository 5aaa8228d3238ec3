# errors.py
"""Custom exception and warning classes."""


class DimensionalityError(ValueError):  # pragma: no cover
    """Dimensions of operators, vectors, or bases are not aligned."""

    pass


class CapacityError(RuntimeError):  # pragma: no cover
    """Basis storage is full; increase the maximum number of samples."""

    pass


class SearchError(RuntimeError):  # pragma: no cover
    """The error indicator search did not produce a usable sample point."""

    pass


class LoadfileFormatError(Exception):  # pragma: no cover
    """File format inconsistent with a loading routine."""

    pass


class PROMWarning(UserWarning):  # pragma: no cover
    """Generic warning for package usage."""

    pass


class RankDeficiencyWarning(PROMWarning):  # pragma: no cover
    """Rank-deficient matrix encountered in the rational interpolation."""

    pass


class ConvergenceWarning(PROMWarning):  # pragma: no cover
    """Iterative solver reached its iteration limit without converging."""

    pass
