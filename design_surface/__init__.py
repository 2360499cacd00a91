from .core import *
from .canvas import *
from .sdk import ProductClient, PersistenceError
