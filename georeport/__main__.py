import sys

from georeport.main import main

sys.exit(main())
