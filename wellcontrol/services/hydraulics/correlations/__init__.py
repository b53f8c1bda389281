from wellcontrol.schemas.swab import ResolvedRheology

from .base import CorrelationBase
from .bingham import BinghamPlastic
from .power_law import PowerLaw


def correlation_for(rheology: ResolvedRheology, method: str = "bingham-plastic") -> CorrelationBase:
    """Correlation instance for a resolved rheology; power-law falls back to Bingham without n/K."""
    method = method.lower()
    if method == "power-law":
        correlation = PowerLaw.from_rheology(rheology)
        if correlation is not None:
            return correlation
        return BinghamPlastic.from_rheology(rheology)
    elif method == "bingham-plastic":
        return BinghamPlastic.from_rheology(rheology)
    raise ValueError(f"Unknown correlation method: {method}")


__all__ = ["CorrelationBase", "BinghamPlastic", "PowerLaw", "correlation_for"]
