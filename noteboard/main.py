"""Main entry point for Note Board."""

import sys

from noteboard.ui.application import create_application


def main():
    """
    Run the Note Board application.
    """
    app = create_application()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
