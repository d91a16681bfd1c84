import sys

from .appender import main

sys.exit(main())
