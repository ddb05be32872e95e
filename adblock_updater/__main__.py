import sys

from adblock_updater.pipeline import main

sys.exit(main())
