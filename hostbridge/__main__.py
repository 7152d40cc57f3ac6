"""python -m hostbridge <editor|workspace> [args...]

The first argument picks the launcher; everything after it reaches the
embedded program untouched.
"""

import sys

from hostbridge.bootstrap import main
from hostbridge.profiles import get_profile


def _cli() -> int:
    if len(sys.argv) < 2:
        print("usage: python -m hostbridge <editor|workspace> [args...]", file=sys.stderr)
        return 64
    try:
        profile = get_profile(sys.argv[1])
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 64
    return main(profile, [sys.argv[0], *sys.argv[2:]])


if __name__ == "__main__":
    sys.exit(_cli())
