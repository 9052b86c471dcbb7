import os
import sys

# Lets the suite import `mti` from a plain checkout without installing it.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
