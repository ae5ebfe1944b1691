# Allows `python -m dcsetup`
import sys

from dcsetup.cli import main

sys.exit(main())
