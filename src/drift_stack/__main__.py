"""Allow ``python -m drift_stack``."""

import sys

from drift_stack.cli import main


sys.exit(main())
