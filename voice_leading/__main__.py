import sys

from voice_leading.cli import main

sys.exit(main())
