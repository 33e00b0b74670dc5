"""
Thai Document Stamping Services
Stamps, forms and reports for school administration documents
"""

from .document_stamping import DocumentGenerator, StampService, TemplateManager

__all__ = [
    'DocumentGenerator',
    'StampService',
    'TemplateManager',
]
