"""Allow ``python -m ftlcatalog.codegen``."""

import sys

from ftlcatalog.codegen.cli import main

sys.exit(main())
