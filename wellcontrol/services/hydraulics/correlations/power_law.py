import math
from typing import Optional

from wellcontrol.schemas.swab import ResolvedRheology
from wellcontrol.utils.conversions import floor_positive
from .base import CorrelationBase


class PowerLaw(CorrelationBase):
    """
    Power-law (Ostwald-de Waele) fluid with the Metzner-Reed apparent viscosity

        μ' = K · ((3n+1)/(4n))ⁿ · (8V/D)ⁿ⁻¹

    so that the laminar branch f = 64/Re' reproduces the Mooney-Rabinowitsch
    wall shear stress, dP/dL = 4·τw/D.
    """
    method_name = "power-law"

    def __init__(self, n: float, k: float, epsilon: Optional[float] = None, laminar_limit: Optional[float] = None):
        super().__init__(epsilon, laminar_limit)
        self.n = floor_positive(n, self.epsilon)
        self.k = max(k, 0.0)

    @classmethod
    def from_rheology(cls, rheology: ResolvedRheology) -> Optional["PowerLaw"]:
        if rheology.n is None or rheology.k is None:
            return None
        return cls(rheology.n, rheology.k)

    def apparent_viscosity(self, velocity: float, diameter: float) -> float:
        n = self.n
        nominal_rate = 8.0 * floor_positive(abs(velocity), self.epsilon) / floor_positive(diameter, self.epsilon)
        return self.k * math.pow((3.0 * n + 1.0) / (4.0 * n), n) * math.pow(nominal_rate, n - 1.0)
