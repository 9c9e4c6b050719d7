import sys

from busylight.cli import main

sys.exit(main())
