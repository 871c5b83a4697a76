import sys

from emr_spark.cli import main

sys.exit(main())
