import sys

from cdetect.command import main

sys.exit(main())
