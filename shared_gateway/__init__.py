"""
shared-gateway

Reconcile a compiled CloudFormation template against a shared API Gateway REST API.
"""

__version__ = "0.1.0"
