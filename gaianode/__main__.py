import sys

from gaianode.cli import main

sys.exit(main())
