# roms/_prom.py
"""Parametric reduced-order model of a frequency-domain problem."""

__all__ = [
    "PROM",
]

import logging
import numpy as np

from .. import basis as _basis, eigen, errors, operators, utils
from .. import indicator as _indicator
from ..parallel import norm as _global_norm
from ._reduced import (
    REDUCED_SOLVERS,
    assemble_reduced_system,
    solve_reduced_system,
    expand,
)


ORTHOG_TOL = 1e-12

_SQRT_EPS = np.sqrt(np.finfo(float).eps)


requires_basis = utils.requires2(
    "dimension",
    "reduced basis is empty, call update()",
)


class PROM:
    r"""Parametric reduced-order model (PROM) for the frequency-domain
    problem

    .. math::
       (\K + i\omega\C - \omega^2\M + \A_2(\omega))\u(\omega)
       = i\omega\b_1 + \b_2(\omega).

    A real orthonormal basis :math:`\V` is built from sampled full-order
    (HDM) solutions, two vectors (real and imaginary parts) per sample.
    The parameter-independent operators are projected onto :math:`\V`
    incrementally, so that the reduced system

    .. math::
       (\K_r + i\omega\C_r - \omega^2\M_r + \V\trp\A_2(\omega)\V)\y
       = i\omega\b_{1,r} + \V\trp\b_2(\omega),
       \qquad \u \approx \V\y,

    is cheap to solve at any :math:`\omega`. The sampled solutions also
    feed a :class:`adaptprom.indicator.RationalErrorIndicator`, which
    estimates where the reduced solution is least accurate.

    Parameters
    ----------
    space_operator : adaptprom.fom.SpaceOperatorTemplate
        Full-order collaborator (operators, excitations, linear solver).
    max_size : int
        Maximum number of samples. The basis stores up to
        ``2 * max_size`` vectors.
    orthogonalization : str
        Gram-Schmidt variant: ``"mgs"``, ``"cgs"``, or ``"cgs2"``.
    solver : str
        Dense reduced solver: ``"lu"`` or ``"ldlt"``.
    dependence_tol : float
        Relative tolerance below which a new basis vector is considered
        linearly dependent and skipped.
    """

    def __init__(
        self,
        space_operator,
        max_size: int,
        orthogonalization: str = "cgs2",
        solver: str = "lu",
        dependence_tol: float = 1e-12,
    ):
        """Query the parameter-independent operators and allocate storage."""
        if int(max_size) < 1:
            raise ValueError(
                "reduced order basis storage must have > 0 columns"
            )
        if orthogonalization not in _basis.GS_METHODS:
            raise ValueError(
                f"invalid orthogonalization '{orthogonalization}' "
                f"(options: {', '.join(_basis.GS_METHODS)})"
            )
        if solver not in REDUCED_SOLVERS:
            raise ValueError(
                f"invalid reduced solver '{solver}' "
                f"(options: {', '.join(REDUCED_SOLVERS)})"
            )
        self.__spaceop = space_operator
        self.__max_size = int(max_size)
        self.__solver = solver

        # Parameter-independent operators, queried once.
        self.__K = space_operator.stiffness_matrix()
        self.__C = space_operator.damping_matrix()
        self.__M = space_operator.mass_matrix()
        if self.__K is None or self.__M is None:
            raise ValueError("missing stiffness or mass matrix for PROM")
        if self.__C is not None and self.__C.is_zero:
            self.__C = None
        b1 = space_operator.excitation_vector1()
        self.__b1 = None if b1 is None else np.asarray(b1, dtype=complex)
        self.__has_A2 = self.__has_RHS2 = True

        n, comm = space_operator.size, space_operator.comm
        self.__V = _basis.IncrementalBasis(
            n,
            2 * self.__max_size,
            dtype=float,
            method=orthogonalization,
            comm=comm,
            dependence_tol=dependence_tol,
        )
        self.__indicator = _indicator.RationalErrorIndicator(
            n,
            self.__max_size,
            method=orthogonalization,
            comm=comm,
        )
        self.__projector = operators.Projector(n, comm)

        self.__Kr = np.zeros((0, 0), dtype=complex)
        self.__Mr = np.zeros((0, 0), dtype=complex)
        self.__Cr = None
        self.__RHS1r = None
        self.__samples = []

    # Properties --------------------------------------------------------------
    @property
    def space_operator(self):
        """Full-order collaborator."""
        return self.__spaceop

    @property
    def comm(self):
        """Communicator shared by all workers."""
        return self.__spaceop.comm

    @property
    def max_size(self) -> int:
        """Maximum number of samples."""
        return self.__max_size

    @property
    def orthogonalization(self) -> str:
        """Gram-Schmidt variant for the bases."""
        return self.__V.method

    @property
    def solver(self) -> str:
        """Dense reduced solver."""
        return self.__solver

    @property
    def dependence_tol(self) -> float:
        """Relative tolerance for linear dependence of basis vectors."""
        return self.__V.dependence_tol

    @property
    def basis(self) -> _basis.IncrementalBasis:
        r"""Real orthonormal reduction basis :math:`\V`."""
        return self.__V

    @property
    def dimension(self) -> int:
        """Current dimension of the reduction basis."""
        return self.__V.dim

    @property
    def indicator(self) -> _indicator.RationalErrorIndicator:
        """Rational error indicator built from the sampled solutions."""
        return self.__indicator

    @property
    def snapshot_basis(self) -> _basis.IncrementalBasis:
        r"""Orthonormal basis :math:`\Q` of the sampled solutions."""
        return self.__indicator.snapshot_basis

    @property
    def sample_parameters(self) -> list:
        """Parameter values sampled so far, in insertion order."""
        return list(self.__samples)

    @property
    def Kr(self):
        r"""Reduced stiffness matrix :math:`\V\trp\K\V`."""
        return self.__Kr

    @property
    def Cr(self):
        r"""Reduced damping matrix :math:`\V\trp\C\V` (``None`` if there
        is no damping).
        """
        return self.__Cr

    @property
    def Mr(self):
        r"""Reduced mass matrix :math:`\V\trp\M\V`."""
        return self.__Mr

    @property
    def RHS1r(self):
        r"""Reduced excitation :math:`\V\trp\b_1` (``None`` if there is no
        excitation).
        """
        return self.__RHS1r

    @property
    def has_A2(self) -> bool:
        r"""Whether :math:`\A_2(\omega)` was nonzero at the last HDM solve."""
        return self.__has_A2

    @property
    def has_RHS2(self) -> bool:
        r"""Whether :math:`\b_2(\omega)` is still queried."""
        return self.__has_RHS2

    def __str__(self):
        out = [self.__class__.__name__]
        out.append(f"Full-order local size: {self.__V.n:d}")
        out.append(f"Reduced dimension: {self.dimension:d} "
                   f"(capacity {self.__V.capacity:d})")
        out.append(f"Samples: {len(self.__samples):d} "
                   f"(maximum {self.max_size:d})")
        out.append(f"Orthogonalization: {self.orthogonalization}")
        out.append(f"Reduced solver: {self.solver}")
        return "\n  ".join(out)

    def __repr__(self):
        return utils.str2repr(self)

    # Full-order model --------------------------------------------------------
    def solve_hdm(self, omega: float):
        r"""Solve the full-order system at the parameter value ``omega``.

        The system matrix :math:`\A(\omega) = \K + i\omega\C - \omega^2\M
        + \A_2(\omega)` and right-hand side :math:`i\omega\b_1 +
        \b_2(\omega)` are assembled here and passed to the collaborator's
        ``solve()``. Once the collaborator reports :math:`\b_2 = 0`, it is
        not queried again.

        Returns
        -------
        u : (n,) complex ndarray
            Local slice of the full-order solution.
        """
        omega = float(omega)
        spaceop = self.__spaceop
        with utils.TimedBlock(f"HDM solve at omega = {omega:.6e}",
                              category="HDM solve"):
            A2 = spaceop.extra_system_matrix(omega)
            self.__has_A2 = A2 is not None
            A = operators.ComplexOperator.combine([
                (1.0, self.__K),
                (1j * omega, self.__C),
                (-omega**2, self.__M),
                (1.0, A2),
            ])

            b = np.zeros(self.__V.n, dtype=complex)
            if self.__has_RHS2:
                b2 = spaceop.excitation_vector2(omega)
                self.__has_RHS2 = b2 is not None
                if b2 is not None:
                    b += b2
            if self.__b1 is not None:
                b += 1j * omega * self.__b1

            return np.asarray(spaceop.solve(A, b), dtype=complex)

    # Reduced-order model construction ----------------------------------------
    def update(self, omega: float, u):
        r"""Add the full-order solution ``u`` sampled at ``omega``.

        The real and imaginary parts of ``u`` are appended to the basis
        (each only if its norm exceeds a tiny fraction of
        :math:`\|\u\|`; dependent parts are skipped), the reduced
        operators are extended to the new basis vectors, and ``u`` is
        inserted in the error indicator.

        Parameters
        ----------
        omega : float
            Parameter value of the sample.
        u : (n,) complex ndarray
            Local slice of the full-order solution.
        """
        omega = float(omega)
        u = np.asarray(u, dtype=complex)
        if u.shape != (self.__V.n,):
            raise errors.DimensionalityError(
                f"u.shape = {u.shape} != {(self.__V.n,)}"
            )
        comm = self.comm
        normr = _global_norm(u.real, comm)
        normi = _global_norm(u.imag, comm)
        unorm = np.sqrt(normr**2 + normi**2)
        parts = [
            part for part, partnorm in ((u.real, normr), (u.imag, normi))
            if partnorm > ORTHOG_TOL * unorm
        ]
        if self.dimension + len(parts) > self.__V.capacity:
            raise errors.CapacityError(
                "unable to increase basis storage size, "
                "increase maximum number of samples"
            )
        if self.__indicator.num_samples >= self.__indicator.max_samples:
            raise errors.CapacityError(
                "unable to increase snapshot storage size, "
                "increase maximum number of samples"
            )

        dim0 = self.dimension
        for part in parts:
            accepted, _ = self.__V.append(np.ascontiguousarray(part))
            if not accepted:
                logging.debug(f"skipped dependent basis vector (omega = "
                              f"{omega:.6e})")
        if self.dimension > dim0:
            self._project(dim0)

        self.__indicator.add_sample(omega, u)
        self.__samples.append(omega)
        logging.info(f"PROM updated at omega = {omega:.6e} "
                     f"(dim(V) = {self.dimension}, "
                     f"samples = {len(self.__samples)})")

    def extend_basis(self, omega: float, u):
        """Alias for :meth:`update`."""
        return self.update(omega, u)

    def _project(self, dim0: int):
        """Extend the reduced operators from ``dim0`` to the current basis
        dimension.
        """
        V = self.__V.entries
        project = self.__projector.project_matrix
        with utils.TimedBlock(f"PROM projection ({dim0} -> {V.shape[1]})",
                              category="projection"):
            self.__Kr = project(V, self.__K, self.__Kr, n0=dim0)
            if self.__C is not None:
                self.__Cr = project(V, self.__C, self.__Cr, n0=dim0)
            self.__Mr = project(V, self.__M, self.__Mr, n0=dim0)
            if self.__b1 is not None:
                self.__RHS1r = self.__projector.project_vector(
                    V, self.__b1, self.__RHS1r, n0=dim0
                )

    def _project_extra_matrix(self, omega: float):
        r"""Reduced :math:`\V\trp\A_2(\omega)\V`, or ``None``."""
        A2 = self.__spaceop.extra_system_matrix(omega)
        if A2 is None or A2.is_zero:
            return None
        return self.__projector.project_matrix(self.__V.entries, A2, n0=0)

    # Reduced-order model evaluation ------------------------------------------
    @requires_basis
    def reduced_system(self, omega: float):
        """Assemble the reduced system matrix and right-hand side at
        ``omega``.

        Returns
        -------
        Ar : (r, r) complex ndarray
        br : (r,) complex ndarray
        """
        omega = float(omega)
        Ar2 = self._project_extra_matrix(omega) if self.__has_A2 else None
        Ar = assemble_reduced_system(omega, self.__Kr, self.__Mr,
                                     self.__Cr, Ar2)

        br = np.zeros(self.dimension, dtype=complex)
        if self.__has_RHS2:
            b2 = self.__spaceop.excitation_vector2(omega)
            if b2 is not None:
                br += self.__projector.project_vector(self.__V.entries, b2)
        if self.__RHS1r is not None:
            br += 1j * omega * self.__RHS1r
        return Ar, br

    @requires_basis
    def solve_prom(self, omega: float, expand_solution: bool = True):
        """Solve the reduced system at ``omega``.

        Parameters
        ----------
        omega : float
            Parameter value.
        expand_solution : bool
            If ``True`` (default), return the local slice of the
            full-order reconstruction. Otherwise return the reduced
            coefficients.

        Returns
        -------
        (n,) or (r,) complex ndarray
        """
        with utils.TimedBlock(f"PROM solve at omega = {float(omega):.6e}",
                              category="PROM solve"):
            Ar, br = self.reduced_system(omega)
            y = solve_reduced_system(Ar, br, self.solver)
        if not expand_solution:
            return y
        return expand(self.__V.entries, y)

    def find_max_error(self, start: float, delta: float, num_steps: int):
        """Parameter value among ``start + k * delta``, ``k < num_steps``,
        where the error indicator predicts the largest PROM error.
        """
        return self.__indicator.find_max_error(start, delta, num_steps)

    # Eigenvalue estimates ----------------------------------------------------
    def _eigen_function(self, lam, jacobian=True):
        r"""Evaluate :math:`\T(\lambda) = \K_r + \lambda\C_r + \lambda^2\M_r
        + \A_{2,r}(|\Im\lambda|)` and, optionally, :math:`\T'(\lambda)`.
        """
        lam = complex(lam)
        T = self.__Kr + lam**2 * self.__Mr
        if self.__Cr is not None:
            T = T + lam * self.__Cr
        dT = None
        if jacobian:
            dT = 2 * lam * self.__Mr
            if self.__Cr is not None:
                dT = dT + self.__Cr
        if self.__has_A2:
            w = abs(lam.imag)
            Ar2 = self._project_extra_matrix(w)
            if Ar2 is not None:
                T = T + Ar2
                if jacobian:
                    # Forward difference in omega; d(omega)/d(lambda) is
                    # -i for Im(lambda) >= 0 and +i otherwise.
                    h = _SQRT_EPS * max(w, 1.0)
                    Ar2h = self._project_extra_matrix(w + h)
                    if Ar2h is None:
                        Ar2h = np.zeros_like(Ar2)
                    sign = 1.0 if lam.imag >= 0 else -1.0
                    dT = dT - 1j * sign * (Ar2h - Ar2) / h
        return T, dT

    @requires_basis
    def compute_eigenvalue_estimates(
        self,
        omega: float,
        num_eig=None,
        method: str = "mslp",
        selection="smallest",
        max_iter: int = 100,
        tol: float = 1e-9,
        seed=0,
    ):
        r"""Estimate eigenfrequencies from the reduced nonlinear eigenvalue
        problem :math:`\T(\lambda)\x = \0` near :math:`\lambda = i\omega`.

        Parameters
        ----------
        omega : float
            Frequency around which to search.
        num_eig : int or None
            Number of eigenvalues (default: the basis dimension).
        method : str
            ``"mslp"`` or ``"rii"``, see :func:`adaptprom.eigen.solve_nep`.
        selection : str or callable
            MSLP eigenvalue selection policy; ``"closest"`` targets
            :math:`i\omega`.
        max_iter : int
            Maximum number of iterations per eigenpair.
        tol : float
            Relative residual tolerance.
        seed : int or None
            Seed for the random initial vectors.

        Returns
        -------
        list of (complex, (r,) complex ndarray)
            Pairs :math:`(\lambda/i, \x)` of eigenfrequency estimates and
            reduced eigenvectors.
        """
        if num_eig is None:
            num_eig = self.dimension
        with utils.TimedBlock(f"PROM eigenvalue estimates near "
                              f"omega = {float(omega):.6e}",
                              category="eigenvalues"):
            lambdas, X, _ = eigen.solve_nep(
                self.dimension,
                self._eigen_function,
                1j * float(omega),
                num_eig,
                method=method,
                selection=selection,
                max_iter=max_iter,
                tol=tol,
                seed=seed,
            )
        return [(lam / 1j, X[:, j]) for j, lam in enumerate(lambdas)]

    # Persistence -------------------------------------------------------------
    def save(self, savefile, overwrite=False):
        """Serialize the PROM (bases, reduced operators, samples) in HDF5
        format. The full-order collaborator is not saved; pass it to
        :meth:`load`.

        Parameters
        ----------
        savefile : str
            File to save to, with extension ``.h5`` (HDF5).
        overwrite : bool
            If ``True`` and the specified ``savefile`` already exists,
            overwrite the file. If ``False`` (default) and the specified
            ``savefile`` already exists, raise an error.
        """
        with utils.hdf5_savehandle(savefile, overwrite=overwrite) as hf:

            # Metadata.
            meta = hf.create_dataset("meta", shape=(0,))
            meta.attrs["max_size"] = self.max_size
            meta.attrs["orthogonalization"] = self.orthogonalization
            meta.attrs["solver"] = self.solver
            meta.attrs["dependence_tol"] = self.dependence_tol
            meta.attrs["has_A2"] = self.has_A2
            meta.attrs["has_RHS2"] = self.has_RHS2

            # Reduction basis and reduced operators.
            utils.save_vectors(hf, "V", self.__V.entries)
            hf.create_dataset("Kr", data=self.__Kr)
            hf.create_dataset("Mr", data=self.__Mr)
            if self.__Cr is not None:
                hf.create_dataset("Cr", data=self.__Cr)
            if self.__RHS1r is not None:
                hf.create_dataset("RHS1r", data=self.__RHS1r)
            hf.create_dataset("samples", data=np.array(self.__samples))

            # Error indicator.
            mri = self.__indicator
            gp = hf.create_group("indicator")
            utils.save_vectors(gp, "Q", mri.snapshot_basis.entries)
            gp.create_dataset("R", data=mri.R)
            gp.create_dataset("z", data=mri.samples)

    @classmethod
    def load(cls, loadfile, space_operator):
        """Load a PROM saved with :meth:`save`.

        Parameters
        ----------
        loadfile : str
            File to load from, which should end in ``.h5``.
        space_operator : adaptprom.fom.SpaceOperatorTemplate
            Full-order collaborator to bind to the loaded model.

        Returns
        -------
        PROM
        """
        with utils.hdf5_loadhandle(loadfile) as hf:
            if "meta" not in hf:
                raise errors.LoadfileFormatError("invalid save format")
            meta = hf["meta"].attrs
            prom = cls(
                space_operator,
                int(meta["max_size"]),
                orthogonalization=str(meta["orthogonalization"]),
                solver=str(meta["solver"]),
                dependence_tol=float(meta["dependence_tol"]),
            )
            prom._set_state(
                V=utils.load_vectors(hf, "V"),
                Kr=hf["Kr"][()],
                Mr=hf["Mr"][()],
                Cr=hf["Cr"][()] if "Cr" in hf else None,
                RHS1r=hf["RHS1r"][()] if "RHS1r" in hf else None,
                samples=hf["samples"][()],
                has_A2=bool(meta["has_A2"]),
                has_RHS2=bool(meta["has_RHS2"]),
            )
            gp = hf["indicator"]
            prom.indicator._set_state(
                utils.load_vectors(gp, "Q"),
                gp["R"][()],
                gp["z"][()],
            )
        return prom

    def _set_state(self, V, Kr, Mr, Cr, RHS1r, samples, has_A2, has_RHS2):
        """Restore the basis, reduced operators, and flags."""
        k = np.shape(V)[1]
        for label, Xr in (("Kr", Kr), ("Mr", Mr), ("Cr", Cr)):
            if Xr is not None and np.shape(Xr) != (k, k):
                raise errors.LoadfileFormatError(
                    f"{label} not aligned with basis of dimension {k}"
                )
        self.__V._set_entries(V)
        self.__Kr = np.asarray(Kr, dtype=complex)
        self.__Mr = np.asarray(Mr, dtype=complex)
        self.__Cr = None if Cr is None else np.asarray(Cr, dtype=complex)
        self.__RHS1r = (
            None if RHS1r is None else np.asarray(RHS1r, dtype=complex)
        )
        self.__samples = [float(z) for z in samples]
        self.__has_A2 = has_A2
        self.__has_RHS2 = has_RHS2
