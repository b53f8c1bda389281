import math
from abc import ABC, abstractmethod
from typing import Optional

from wellcontrol.core.config import settings
from wellcontrol.schemas.swab import FlowRegimeEnum, FrictionResult
from wellcontrol.utils.conversions import floor_positive


class CorrelationBase(ABC):
    """
    Base class for single-phase drilling-fluid friction correlations.

    Subclasses supply the apparent viscosity of their rheological model; this
    class turns it into a Reynolds number, a Darcy friction factor and a
    frictional pressure gradient. Every denominator is floored at
    `settings.EPSILON`, so degenerate geometry (zero gap, zero velocity)
    yields finite numbers.

    Units are SI throughout: density kg/m³, velocity m/s, diameter m,
    viscosity Pa·s, gradient Pa/m.
    """
    method_name = "base"

    def __init__(self, epsilon: Optional[float] = None, laminar_limit: Optional[float] = None):
        self.epsilon = settings.EPSILON if epsilon is None else epsilon
        self.laminar_limit = settings.LAMINAR_REYNOLDS_LIMIT if laminar_limit is None else laminar_limit

    @abstractmethod
    def apparent_viscosity(self, velocity: float, diameter: float) -> float:
        raise NotImplementedError

    def _calculate_reynolds_number(self, rho: float, v: float, D: float, mu: float) -> float:
        return rho * v * D / floor_positive(mu, self.epsilon)

    def _calculate_friction_factor(self, Re: float) -> float:
        """
        Darcy friction factor for smooth walls.

        Args:
            Re: Reynolds number

        Returns:
            64/Re when Re <= laminar limit (the limit itself is laminar),
            Blasius 0.3164/Re^0.25 above it
        """
        Re = floor_positive(Re, self.epsilon)
        if Re > self.laminar_limit:
            return 0.3164 / math.pow(Re, 0.25)
        return 64.0 / Re

    def _calculate_friction_gradient(self, f: float, rho: float, v: float, D: float) -> float:
        """Darcy-Weisbach gradient f·ρ·v²/(2·D), Pa/m."""
        return f * rho * v ** 2 / (2.0 * floor_positive(D, self.epsilon))

    def flow_regime(self, Re: float) -> FlowRegimeEnum:
        return FlowRegimeEnum.TURBULENT if Re > self.laminar_limit else FlowRegimeEnum.LAMINAR

    def evaluate(self, rho: float, velocity: float, diameter: float) -> FrictionResult:
        """
        Friction state of a fluid moving at `velocity` through a conduit of
        hydraulic diameter `diameter`.
        """
        v = abs(velocity)
        D = floor_positive(diameter, self.epsilon)
        mu = floor_positive(self.apparent_viscosity(v, D), self.epsilon)
        Re = self._calculate_reynolds_number(rho, v, D, mu)
        f = self._calculate_friction_factor(Re)
        return FrictionResult(
            apparent_viscosity=mu,
            reynolds_number=Re,
            friction_factor=f,
            dpdz=self._calculate_friction_gradient(f, rho, v, D),
            flow_regime=self.flow_regime(Re),
        )
