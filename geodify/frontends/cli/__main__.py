#!/usr/bin/env python3
"""Entry point for `python -m geodify.frontends.cli`."""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
