from __future__ import annotations

import sys
from pathlib import Path

_START = Path(__file__).resolve().parent
_repo_root = _START
while _repo_root != _repo_root.parent and not (_repo_root / "plotpoetry" / "__init__.py").exists():
    _repo_root = _repo_root.parent

sys.path.insert(0, str(_repo_root))
