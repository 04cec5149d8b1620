from gevent import monkey
monkey.patch_all()

import sys

from ut3.cli import main

if __name__ == "__main__":
    sys.exit(main())
