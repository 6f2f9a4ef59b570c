import sys

from project_control.api.cli import main

if __name__ == "__main__":
    sys.exit(main())
