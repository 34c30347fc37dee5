# =============================================================================
# mailsubmit Entry Point for `python -m mailsubmit`
# =============================================================================
# This module allows mailsubmit to be run as a Python module:
#
#   python -m mailsubmit send --to bob@example.com --text hello
#
# This is equivalent to running the 'mailsubmit' command after installation.
# =============================================================================

import sys

from mailsubmit.app import main

if __name__ == "__main__":
    sys.exit(main())
