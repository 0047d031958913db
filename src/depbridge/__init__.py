"""depbridge: Engine-generation independent dependency collection and resolution."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
