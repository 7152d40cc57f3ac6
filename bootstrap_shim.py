"""Bootstrap shim for local execution.

Runs a launcher straight from the checkout. The profile comes from
HOSTBRIDGE_PROFILE (default: editor); the program from HOSTBRIDGE_PROGRAM or
the config file.
"""

import os
import sys

from hostbridge.bootstrap import main
from hostbridge.profiles import get_profile


profile = get_profile(os.environ.get("HOSTBRIDGE_PROFILE", "editor"))
sys.exit(main(profile))
