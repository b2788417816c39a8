import sys

from twentyone.server.cli import main

if __name__ == "__main__":
    sys.exit(main())
