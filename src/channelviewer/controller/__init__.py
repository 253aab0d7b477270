"""
The CONTROLLER layer runs the viewer's algorithms: channel sampling,
obstacle extraction, hit testing and mouse-mode handling, plus the
background workers that keep the UI responsive while they run.
"""
