"""Allow ``python -m sandoc``."""

from sandoc.ui.cli import main


if __name__ == "__main__":
    main()
