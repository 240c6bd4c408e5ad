import sys

from iossim.cli import main

sys.exit(main())
