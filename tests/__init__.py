# Copyright Red Hat
#
# tests/__init__.py - Test-in-sandbox test package
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
import logging

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
log.addHandler(file_handler)
log.addHandler(console_handler)


class MockArgs(object):
    clean = False
    keep_sandbox = False
    yes = False
    color = "never"
    debug = None
    verbose = 0
    version = False
    json = False
    command = []
