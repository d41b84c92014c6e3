#!/usr/bin/env python3
"""
Entry point for the photo harvest tool.
"""

import sys

from photoslurp.cli import main


if __name__ == "__main__":
    sys.exit(main())
