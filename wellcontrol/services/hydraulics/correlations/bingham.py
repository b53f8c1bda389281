from typing import Optional

from wellcontrol.schemas.swab import ResolvedRheology
from wellcontrol.utils.conversions import clamp_non_negative, floor_positive
from .base import CorrelationBase


class BinghamPlastic(CorrelationBase):
    """
    Bingham plastic fluid: μ_app = PV + YP·D/(8·V).

    The yield point contributes most at low velocity and narrow gaps, which
    is the regime of tripping pipe.
    """
    method_name = "bingham-plastic"

    def __init__(self, pv: float, yp: float, epsilon: Optional[float] = None, laminar_limit: Optional[float] = None):
        super().__init__(epsilon, laminar_limit)
        self.pv = clamp_non_negative(pv)
        self.yp = clamp_non_negative(yp)

    @classmethod
    def from_rheology(cls, rheology: ResolvedRheology) -> "BinghamPlastic":
        return cls(rheology.pv, rheology.yp)

    def apparent_viscosity(self, velocity: float, diameter: float) -> float:
        v = floor_positive(abs(velocity), self.epsilon)
        return self.pv + self.yp * clamp_non_negative(diameter) / (8.0 * v)
