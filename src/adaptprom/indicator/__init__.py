# indicator/__init__.py
r"""A posteriori error indicator for greedy parameter sampling.

.. currentmodule:: adaptprom.indicator

**Classes**

.. autosummary::
    :toctree: _autosummaries

    RationalErrorIndicator

**Functions**

.. autosummary::
    :toctree: _autosummaries

    compute_weights
"""

from ._mri import *
