import sys

from qudrat_toolkit.cli import main

sys.exit(main())
