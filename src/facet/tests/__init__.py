"""Tests for the facet templating system."""

import unittest

from facet.tests.test_compiler import *
from facet.tests.test_loader import *
from facet.tests.test_renderer import *


if __name__ == "__main__":
    unittest.main()
