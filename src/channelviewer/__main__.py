"""Run with: python -m channelviewer"""
import sys

from channelviewer.main import main

if __name__ == "__main__":
    sys.exit(main())
