"""Allow running as ``python -m slice_viewer``."""

import sys

from slice_viewer.app import main

sys.exit(main())
