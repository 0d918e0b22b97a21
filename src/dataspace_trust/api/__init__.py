# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
HTTP surface of the trusted-participants service.
"""

from .app import EvaluationRequest, create_app

__all__ = ["EvaluationRequest", "create_app"]
