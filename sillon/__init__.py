from sillon._version import __version__
from sillon.log import setup_logger

setup_logger()

__all__ = ["__version__"]
