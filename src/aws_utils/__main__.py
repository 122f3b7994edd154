import sys

from aws_utils.cli import main

sys.exit(main())
