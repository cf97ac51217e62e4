import sys

from glossary_engine.cli import main

sys.exit(main())
