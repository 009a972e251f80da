from boolsim.exceptions import *
from boolsim.update_rule import *
from boolsim.state_codec import *
from boolsim.attractors import *
from boolsim.boolean_network import *
from boolsim.remote import *
from boolsim.config import *
from boolsim.simulator import *

try:
    from boolsim._version import __version__
except ImportError:
    __version__ = 'unknown'
