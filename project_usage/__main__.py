import sys

from project_usage.cli import main

sys.exit(main())
