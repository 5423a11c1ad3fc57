import sys

from flatfs.cli import main

sys.exit(main())
