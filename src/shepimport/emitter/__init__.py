"""
Emitters: `AppModel` in, `GeneratedFile` pairs out.

Nothing here touches the file system; callers write the returned files.
"""

from ..core.ir import AppModel, GeneratedFile
from .report import REPORT_FILE_NAME, render_report
from .shep import render_shep
from .shepthon import render_shepthon


def emit(model: AppModel, backend: bool = True) -> list[GeneratedFile]:
    """
    Render the ``.shep`` file and, with `backend`, the ``.shepthon`` file.

    The ``.shep`` file is always first.
    """
    files = [GeneratedFile(file_name=f"{model.app_name}.shep", content=render_shep(model))]
    if backend:
        files.append(
            GeneratedFile(file_name=f"{model.app_name}.shepthon", content=render_shepthon(model))
        )
    return files


__all__ = [
    "REPORT_FILE_NAME",
    "emit",
    "render_report",
    "render_shep",
    "render_shepthon",
]
