"""
Gabarito Backend Package
========================

Flask-based backend for building assessments, recording answer keys and
grading student submissions.

Structure:
- routes/: API route blueprints
- services/: Business logic services
- auth.py: Session validation and role gate
- storage.py: Document store backends
- config.py: Configuration management
"""

from .config import config, Config

__version__ = "1.0.0"

__all__ = ['config', 'Config']
