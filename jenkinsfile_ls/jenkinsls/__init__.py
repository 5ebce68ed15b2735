"""Jenkinsfile language server: on-save validation against a Jenkins controller."""

__version__ = "0.1.0"
