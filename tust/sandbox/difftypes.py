# Copyright Red Hat
#
# tust/sandbox/difftypes.py - Test-in-sandbox change types
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Sandbox change types
"""
from enum import Enum


class ChangeType(Enum):
    """
    Enum for the kinds of file-level change between two trees.
    """

    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
