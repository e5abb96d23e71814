from pathlib import Path

VERSION = "1.0.0"

# registry base url is fixed, not user configurable
API_URL = "https://sarver-fullstack-4.onrender.com"

CONFIG_FILE = Path.home() / ".flamconfig.json"

MANIFEST_FILE = "package.json"
INSTALL_DIR_NAME = "flam_modules"
