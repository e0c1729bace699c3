import sys

from asana_connector.main import main

sys.exit(main())
