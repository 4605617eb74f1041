"""Console-script entry point for ``minigit``.

click is an optional dependency; without it the script prints an install
hint instead of a traceback.  Import errors from anything else propagate.
"""

import sys

CLI_EXTRA_HINT = (
    "Error: the minigit command needs click, which ships in the 'cli' extra.\n"
    "Install it with:  pip install 'minigit[cli]'"
)


def main():
    try:
        from .cli import main as cli_main
    except ModuleNotFoundError as exc:
        if exc.name != "click" and not (exc.name or "").startswith("click."):
            raise
        print(CLI_EXTRA_HINT, file=sys.stderr)
        raise SystemExit(1)
    cli_main(prog_name="minigit")
