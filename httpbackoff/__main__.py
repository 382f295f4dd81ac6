"""Allow ``python -m httpbackoff``."""

from __future__ import annotations

import sys

from httpbackoff.cli import main

if __name__ == "__main__":
    sys.exit(main())
