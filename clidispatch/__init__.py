__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'clidispatch'
__author__ = 'clidispatch contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.2.0"

from .command import *
from .commands.help import *
from .dispatch import *
from .faults import *
from .loaders import *
from .naming import *
from .options import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 2, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the command base class
__all__ += command.__all__  # type: ignore[attr-defined]
# Load the exposed API of the built-in help command
__all__ += commands.help.__all__  # type: ignore[attr-defined]
# Load the exposed API of the dispatcher
__all__ += dispatch.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the loaders
__all__ += loaders.__all__  # type: ignore[attr-defined]
# Load the exposed API of the name normalizer
__all__ += naming.__all__  # type: ignore[attr-defined]
# Load the exposed API of the option parser
__all__ += options.__all__  # type: ignore[attr-defined]
