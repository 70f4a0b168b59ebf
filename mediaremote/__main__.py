# ABOUTME: Entry point for running mediaremote as a module
# ABOUTME: Allows execution via python -m mediaremote, which runs the player diagnostic

import sys

from mediaremote.diagnostics import main

if __name__ == "__main__":
    sys.exit(main())
