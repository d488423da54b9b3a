"""
Email Templates Package

HTML templates for verification codes and meeting notices.
"""
from .email_templates import (
    get_email_template,
    get_base_template,
    get_info_card,
    EmailTemplateKey,
    TEMPLATE_REGISTRY
)

__all__ = [
    "get_email_template",
    "get_base_template",
    "get_info_card",
    "EmailTemplateKey",
    "TEMPLATE_REGISTRY"
]
