# Importing the package registers every handler on the shared router.

from . import start     # creates router
from . import menu      # main menu buttons, must precede the FSM text handlers
from . import tracker   # sleep sessions and check-ups
from . import people    # people CRUD
from . import settings  # intervals, notifications, language
from . import archive   # history and export
from . import help      # help
