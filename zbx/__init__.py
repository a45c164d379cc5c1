from __future__ import annotations

from zbx.__about__ import __version__

# Patch typer to remove dimming of help text
# https://github.com/tiangolo/typer/issues/437#issuecomment-1224149402
try:
    import typer

    typer.rich_utils.STYLE_HELPTEXT = ""
except AttributeError:
    import logging

    logging.getLogger(__name__).debug("Failed to patch typer.rich_utils.STYLE_HELPTEXT")

__all__ = ["__version__"]
