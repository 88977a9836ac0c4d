"""
CephFS Provisioner - dynamic CephFS share provisioning for Kubernetes.

This package provides the provisioning lifecycle (share allocation, credential
publication, ownership tracking) together with a REST API for the external
provision controller and a small operator CLI.
"""

__version__ = "0.1.0"
__all__ = ["api", "cli", "provisioner"]
