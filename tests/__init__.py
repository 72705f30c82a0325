"""Pytest configuration file to set up the Python path for testing."""

import sys
from pathlib import Path

# Add the project root to Python path so that 'price_engine' imports work
# without an editable install.
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))
