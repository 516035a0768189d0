from aquafloc.analytics.history import TickHistory
from aquafloc.analytics.kinetics import adsorption_rate_constant, kinetic_curve, recovery_split

__all__ = ["kinetic_curve", "recovery_split", "adsorption_rate_constant", "TickHistory"]
