"""
Module execution entry point.

Allows running with: python -m qrpay_cli
"""

import sys
from qrpay_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
