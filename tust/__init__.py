# Copyright Red Hat
#
# tust/__init__.py - Test-in-sandbox package initialisation
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tust top-level package.
"""
from ._tust import *  # noqa: F401, F403
from ._tust import __all__  # noqa: F401

__version__ = "0.1.0"
