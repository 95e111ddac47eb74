import sys
from pathlib import Path

# Make every app importable from a plain checkout (no `pip install -e .` needed)
ROOT = Path(__file__).resolve().parent
for src in ROOT.glob('apps/*/src'):
    if src.is_dir() and str(src) not in sys.path:
        sys.path.insert(0, str(src))
