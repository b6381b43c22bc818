import sys

from exgen.cli import main

sys.exit(main())
