"""Run the converter as ``python -m html2blocks``.

Reads HTML from a file or standard input and writes block markup; see
:mod:`html2blocks.cli` for the options.
"""

import sys

from html2blocks.cli import main

if __name__ == "__main__":
    sys.exit(main())
