#!/usr/bin/env python3
"""Allow running Geodify with `python -m geodify`."""

import sys

from geodify.frontends.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
