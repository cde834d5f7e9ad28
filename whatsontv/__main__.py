import sys

from whatsontv.cli import main


sys.exit(main())
