"""Enable running headergen as a module: python -m headergen"""

import sys

from headergen import (
    cli,
)

if __name__ == "__main__":
    # pylint: disable=no-value-for-parameter
    sys.exit(cli())
