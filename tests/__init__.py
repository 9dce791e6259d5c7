# Makes "tests" a package so test modules can import tests.helpers.
# Puts the project root on sys.path when pytest is started from another CWD.
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
