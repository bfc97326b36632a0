# pycdo/core/time_step.py
from dataclasses import dataclass


@dataclass
class TimeStep:
    """Current physical time and time-step counter shared by the integrators."""
    t_cur: float = 0.0
    nt_cur: int = 0
    dt: float = 0.0

    def advance(self, dt: float = None):
        if dt is not None:
            self.dt = dt
        self.t_cur += self.dt
        self.nt_cur += 1
