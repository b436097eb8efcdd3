"""pyattrstore - in-memory attribute models with dirty tracking and sequential events."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyattrstore")
except PackageNotFoundError:
    __version__ = "0+local"
from pyattrstore.changes import AttributeChange
from pyattrstore.events import Notifier
from pyattrstore.exceptions import AttrStoreError, InvalidHandlerError
from pyattrstore.model import Model

__all__ = [
    "__version__",
    "AttrStoreError",
    "AttributeChange",
    "InvalidHandlerError",
    "Model",
    "Notifier",
]
