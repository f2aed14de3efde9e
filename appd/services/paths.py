# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

"""Pre-flight validation of stdout/stderr redirection targets."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from appd.exceptions import FilePathError


def validate_file_path(fp: str | os.PathLike[str]) -> None:
    """Check that *fp* can be opened as an output file.

    An existing regular file, or a missing file whose parent directory
    exists, is accepted. Other stat failures propagate unchanged.

    Raises:
        FilePathError: If the path is a directory or its parent is missing.
    """
    path = Path(fp)
    try:
        st = path.stat()
    except FileNotFoundError:
        parent = path.parent
        try:
            parent.stat()
        except FileNotFoundError:
            raise FilePathError(f"parent directory does not exist: {parent}") from None
        except OSError as e:
            raise FilePathError(f"parent directory erred: {parent}") from e
        return

    if stat.S_ISDIR(st.st_mode):
        raise FilePathError("file path is directory")
