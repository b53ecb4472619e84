import sys

from .tryon_app import main

sys.exit(main())
