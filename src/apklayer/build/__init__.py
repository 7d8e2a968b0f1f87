from .options import BuildOptions  # noqa: F401
from .types import Architecture  # noqa: F401
