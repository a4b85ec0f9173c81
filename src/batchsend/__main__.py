import sys

from batchsend.cli import main

sys.exit(main())
