# pycdo/source/workspace.py
import numpy as np


class Workspace:
    """
    Scratch buffers reused from one cell to the next by a single worker.

    ``hdg`` holds the local Hodge operator of the current cell when a
    primal-reduction source term is evaluated. Workers running concurrently
    must each own a Workspace.
    """

    def __init__(self, n_max_vbyc: int, n_max_ebyc: int):
        self.n_max_vbyc = int(n_max_vbyc)
        self.n_max_ebyc = int(n_max_ebyc)
        # vertex (+cell) point values and their Hodge image
        self.values = np.zeros(2 * (self.n_max_vbyc + 1))
        self.vectors = np.zeros((max(self.n_max_vbyc, 1), 3))
        self.hdg = None

    @classmethod
    def for_mesh(cls, mesh) -> "Workspace":
        return cls(mesh.n_max_vbyc, mesh.n_max_ebyc)

    def check(self, cm):
        assert cm.n_vc <= self.n_max_vbyc, \
            f"Workspace sized for {self.n_max_vbyc} vertices, cell {cm.c_id} has {cm.n_vc}"
