import sys

from envguard.main import main

sys.exit(main())
