from __future__ import annotations

import sys

from scorecard_action.cli import main

sys.exit(main())
