"""
The MODEL layer contains pure data structures and numerical logic.
It has NO knowledge of the GUI (Qt).
It deals with coordinates, metrics, color ramps, results and persistence.
"""
