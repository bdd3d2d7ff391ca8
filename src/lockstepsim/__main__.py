import sys

from lockstepsim.cli import main

sys.exit(main())
