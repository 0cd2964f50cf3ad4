"""hamlsass: command-line front-ends for the Haml and Sass compilers.

Ships four executables (``haml``, ``sass``, ``html2haml``, ``css2sass``)
built on one shared option-parsing and dispatch framework.
"""

from hamlsass.version import __version__

__all__: list[str] = ["__version__"]
