"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the Global Data Model (SessionState).
2. Instantiates the radio medium and channel model the viewer observes.
3. Instantiates the Main Window (View) and passes the Model into it.
4. Prevents circular import errors by being the orchestrator.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from channelviewer import __version__
from channelviewer.application import create_app
from channelviewer.logging_config import setup_logging
from channelviewer.model.demo import DemoChannelModel, DemoRadioMedium
from channelviewer.model.state import SessionState
from channelviewer.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="channelviewer",
        description="Interactive viewer of a simulated radio channel.",
    )
    parser.add_argument("--session", metavar="PATH", help="Restore a saved session (.h5).")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--log-file", metavar="PATH", help="Also write the log to this file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the Data Model and its collaborators
    state = SessionState()
    medium = DemoRadioMedium.with_default_radios()
    channel_model = DemoChannelModel()

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state, medium, channel_model)
    if args.session:
        try:
            window.load_session(args.session)
        except Exception as e:
            logger.error(f"Could not restore session '{args.session}': {e}")
    window.show()

    # 5. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
