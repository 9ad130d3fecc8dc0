"""Sphinx configuration for the Salon Admin API documentation."""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

project = "Salon Admin API"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx_autodoc_typehints",
]

autodoc_member_order = "bysource"
autodoc_mock_imports = ["supabase", "uvicorn"]
napoleon_numpy_docstring = True
napoleon_google_docstring = False

exclude_patterns: list[str] = ["_build"]
