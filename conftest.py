# Make `import gateway` resolve to this checkout when running pytest from the
# repository root without installing the package first.
import os
import sys

REPO_ROOT = os.path.dirname(__file__)

if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)
