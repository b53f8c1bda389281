# wellcontrol/__init__.py

"""
Well control hydraulics and geometry engine.

Provides:
- Wellbore volume summaries (string capacity, displacement, annulus, open hole)
- Swab and surge pressure estimates with recommended surface backpressure
- Pump schedule displacement simulation with circulating hydraulics
"""

__version__ = "1.0.0"
