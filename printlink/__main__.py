import sys

from printlink.app.main import main

sys.exit(main())
