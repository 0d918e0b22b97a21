# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Command line interface.
"""

from .main import app, main

__all__ = ["app", "main"]
