# wellcontrol/services/pump_schedule/__init__.py

"""
Pump schedule displacement simulation.
"""

from .hydraulics import circulating_hydraulics
from .simulator import PumpScheduleSimulator, build_stages, simulate_pump_schedule
from .stacks import WellColumn
