import sys

from fogimport.cli import main

sys.exit(main())
