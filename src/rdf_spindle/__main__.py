import sys

from rdf_spindle.cli import main

sys.exit(main())
