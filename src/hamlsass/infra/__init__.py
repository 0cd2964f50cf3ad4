"""Infrastructure layer: adapters around the external compiler libraries.

Every raw third-party exception must be caught here and re-raised as a
:class:`~hamlsass.exceptions.HamlSassError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output.
* Libraries are imported lazily so ``--help`` never needs them.
"""

from hamlsass.infra.css_converter import CssToSassConverter
from hamlsass.infra.hamlpy_engine import HamlPyEngine
from hamlsass.infra.html_converter import HtmlToHamlConverter
from hamlsass.infra.libsass_engine import LibSassEngine

__all__: list[str] = [
    "CssToSassConverter",
    "HamlPyEngine",
    "HtmlToHamlConverter",
    "LibSassEngine",
]
