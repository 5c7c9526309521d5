"""
CLI Menu Components for Geodify Frontend
"""

from .setup_wizard import SetupWizardMenu

__all__ = [
    'SetupWizardMenu',
]
