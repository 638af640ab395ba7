import sys

from hilicurl.main import main

sys.exit(main())
