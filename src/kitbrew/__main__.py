import sys

from kitbrew.cli import main

if __name__ == "__main__":
    sys.exit(main())
