"""Kubernetes operator that ensures every namespace carries the default
RoleBindings for image pulling, image building and deployment.
"""
