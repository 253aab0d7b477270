"""
Development Launcher
====================
Starts the viewer straight from a source checkout.

The 'src' directory is put at the front of 'sys.path', so local edits to
'channelviewer' are picked up without `pip install -e .`. Command line
options are passed through to channelviewer.main.

Usage:
    $ python run.py [--session PATH] [--debug] [--log-file PATH]
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from channelviewer.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
