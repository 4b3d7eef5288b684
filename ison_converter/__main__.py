"""Package entry point for ``python -m ison_converter``.

WHY: Users run the converter as ``python -m ison_converter users.ison``
without installing the console script. Python's ``-m`` flag looks for
``__main__.py`` inside the package and executes it.

HOW: Delegates to the CLI's main() function and exits with its status.
"""

import sys

from ison_converter.cli import main

if __name__ == "__main__":
    sys.exit(main())
