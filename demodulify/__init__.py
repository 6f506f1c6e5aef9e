"""demodulify.

Flattens a bundler's module graph into a single namespaced script for hosts
without a module system (e.g. Google Apps Script).
"""

from .config import DemodulifyOptions, resolve_options
from .plugin import DemodulifyPlugin

__all__ = ["DemodulifyOptions", "DemodulifyPlugin", "resolve_options", "__version__"]

__version__ = "0.1.0"
