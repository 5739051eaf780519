import sys

from chatrelay.cli import main

sys.exit(main())
