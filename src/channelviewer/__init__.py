"""
Channel Area Viewer

Interactive 2-D exploration of a simulated radio-propagation channel:
registered radios, computed channel maps for a selected transmitter,
background imagery and color-classified obstacles.
"""

__version__ = "0.1.0"
