# Make `import flow_proxy` resolve to this checkout when tests run without
# an editable install.
import os
import sys

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)
