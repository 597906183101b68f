import sys

from shipwright.cli import main

sys.exit(main())
