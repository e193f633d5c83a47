"""
Auto-Reply Domain Layer
=======================

Contains:
- Template: canned reply record
- TemplateContext: placeholder values
- TemplateRenderer: substitution + signature
"""

from supportdesk.autoreply.domain.entities import (
    Template,
    TemplateContext,
    TemplateRenderer,
)

__all__ = [
    "Template",
    "TemplateContext",
    "TemplateRenderer",
]
