"""
Roles2Library Migrations
========================

Ordered deployment steps for the Roles2Library permission system:
- templates/: numbered migration steps (_1_ ... _4_)
- runner: executes pending steps in ascending order
- deployer: deploys contracts and tracks them in deployment.json
"""

__version__ = "1.0.0"
__author__ = "Roles2Library Migrations Team"
