import sys

from laptop_tap.main import main

sys.exit(main())
