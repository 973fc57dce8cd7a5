"""moonbundle - bundle a MoonLoader Lua script and its local modules into one file."""

import logging

__version__ = "1.0.0"

# Records stay silent unless a sink is configured (see logging_setup)
logging.getLogger(__name__).addHandler(logging.NullHandler())
