import sys

from snippet_organizer.cli import main


if __name__ == "__main__":
    sys.exit(main())
