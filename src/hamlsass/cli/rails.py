"""``--rails RAILS_DIR``: install the Haml plugin stub into a Rails project.

Every outcome, including refusal, ends the process with status 0; the
caller raises ``SystemExit`` once this returns.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any

from hamlsass.cli.console import out
from hamlsass.exceptions import MissingDependencyError

RAILS_INIT = """\
begin
  require File.join(File.dirname(__FILE__), 'lib', 'haml') # From here
rescue LoadError
  require 'haml' # From gem
end

# Load Haml and Sass
Haml.init_rails(binding)
"""


def _import_questionary() -> Any:
    """Import questionary lazily for the overwrite prompt."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise MissingDependencyError("questionary") from exc
    return questionary


def confirm_overwrite(directory: Path) -> bool:
    """Ask before replacing an existing plugin directory (default: no)."""
    questionary = _import_questionary()
    answer: bool | None = questionary.confirm(
        f"Directory {directory} already exists, overwrite?",
        default=False,
    ).ask()  # Returns None on Ctrl+C
    return bool(answer)


def install_rails_plugin(rails_dir: str) -> bool:
    """Create ``vendor/plugins/haml/init.rb`` under *rails_dir*.

    Returns ``True`` when the plugin was written.
    """
    plugins = Path(rails_dir) / "vendor" / "plugins"
    if not plugins.exists():
        out.print(f"Directory {plugins} doesn't exist")
        return False

    target = plugins / "haml"
    if target.exists():
        if not confirm_overwrite(target):
            return False
        shutil.rmtree(target)

    try:
        target.mkdir()
    except OSError:
        out.print(f"Cannot create {target}")
        return False

    (target / "init.rb").write_text(RAILS_INIT, encoding="utf-8")
    out.print(f"Haml plugin added to {rails_dir}")
    return True
