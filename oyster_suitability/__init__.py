"""
Oyster Aquaculture Suitability - US West Coast EEZ
===================================================
Combines bathymetry and mean sea-surface temperature into a binary
suitability mask and sums the suitable area inside each EEZ region.
"""

__version__ = "0.1.0"
