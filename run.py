"""Command-line entry point for the memcfg tool.

Runs the offline commands from a source checkout without installing the
package::

    python run.py setup -m memmap.yaml -s config.yaml -o setup.uf2
"""

from __future__ import annotations

import sys

from pymemcfg.cli.app import main


if __name__ == "__main__":
    sys.exit(main())
