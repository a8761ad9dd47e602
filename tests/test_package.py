"""
Test cases for package metadata.
"""

import re

import sys
import os
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)

import pyvariography


class TestMetadata:
    """Test that the package metadata matches setup.py."""

    def setup_method(self):
        with open(os.path.join(ROOT, "setup.py")) as f:
            self.setup_text = f.read()

    def test_author(self):
        author = re.search(r'author="([^"]*)"', self.setup_text).group(1)
        assert pyvariography.__author__ == author

    def test_version(self):
        version = re.search(r'version="([^"]*)"', self.setup_text).group(1)
        assert pyvariography.__version__ == version
