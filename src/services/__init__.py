"""
Reusable service functions for the relay and the contact form.

This package contains validation, retry policy and configuration loading.
"""

__all__ = ['config', 'retry', 'validation']
