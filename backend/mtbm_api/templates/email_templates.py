"""
Email Templates - HTML email bodies for codes and meeting notices

Templates use tables and inline styles so they render the same in Outlook,
Gmail and Apple Mail.
"""
from html import escape
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum


class EmailTemplateKey(str, Enum):
    """All available email template types"""
    OTP_CODE = "OTP_CODE"
    PASSWORD_RESET_CODE = "PASSWORD_RESET_CODE"
    MEETING_REQUESTED = "MEETING_REQUESTED"      # To the service mailbox
    MEETING_CONFIRMATION = "MEETING_CONFIRMATION"  # To the visitor


# =============================================================================
# Base Template Wrapper
# =============================================================================

def get_base_template(
    content: str,
    footer_note: Optional[str] = None,
    accent_color: str = "#5B89B1"
) -> str:
    """Shared frame: header bar, content card, footer"""
    footer_note_html = ""
    if footer_note:
        footer_note_html = f'''
        <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="margin-top: 16px;">
            <tr>
                <td style="padding: 16px; background-color: #FEF3C7; font-size: 13px; color: #92400E; font-family: Arial, sans-serif;">
                    {footer_note}
                </td>
            </tr>
        </table>
        '''

    return f'''
<!DOCTYPE html>
<html>
<head>
    <meta http-equiv="Content-Type" content="text/html; charset=UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>MTBM Dashboard</title>
</head>
<body style="margin: 0; padding: 0; background-color: #F8FAFC; font-family: Arial, Helvetica, sans-serif;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color: #F8FAFC;">
        <tr>
            <td style="padding: 32px 20px;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" align="center" style="margin: 0 auto; max-width: 600px;">
                    <tr>
                        <td style="background-color: {accent_color}; padding: 24px; border-radius: 8px 8px 0 0; text-align: center;">
                            <span style="color: #ffffff; font-size: 24px; font-weight: bold;">MTBM Dashboard</span>
                        </td>
                    </tr>
                    <tr>
                        <td style="background-color: #ffffff; padding: 32px 40px 40px 40px; border-radius: 0 0 8px 8px;">
                            {content}
                            {footer_note_html}
                        </td>
                    </tr>
                    <tr>
                        <td style="padding-top: 24px; text-align: center; color: #9CA3AF; font-size: 12px;">
                            MTBM - Micro Tunnel Boring Machine
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
'''


def get_info_card(rows: List[Tuple[str, str]]) -> str:
    """Two-column label/value table; values are escaped"""
    cells = "".join(
        f'''
        <tr>
            <td style="padding: 8px; color: #666666; border-bottom: 1px solid #EEEEEE;">{escape(label)}</td>
            <td style="padding: 8px; font-weight: 600; border-bottom: 1px solid #EEEEEE;">{escape(value)}</td>
        </tr>'''
        for label, value in rows if value
    )
    return f'''
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="border-collapse: collapse;">
        {cells}
    </table>
    '''


def _code_block(code: str) -> str:
    return f'''
    <div style="background-color: #F3F4F6; padding: 20px; text-align: center; border-radius: 8px; margin: 24px 0;">
        <span style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #1F2937;">{escape(code)}</span>
    </div>
    '''


# =============================================================================
# Templates
# =============================================================================

def get_otp_code_template(payload: Dict[str, Any], app_url: str = "") -> Dict[str, str]:
    """Template: Email verification code"""
    minutes = payload.get("ttl_minutes", 10)
    content = f'''
    <p style="color: #666666; font-size: 16px;">Your MTBM verification code is:</p>
    {_code_block(payload.get("code", ""))}
    <p style="color: #666666; font-size: 14px;">This code will expire in {minutes} minutes.</p>
    '''
    return {
        "subject": "Your MTBM Verification Code",
        "body": get_base_template(
            content,
            footer_note="If you didn't request this code, please ignore this email."
        ),
    }


def get_password_reset_code_template(payload: Dict[str, Any], app_url: str = "") -> Dict[str, str]:
    """Template: Password reset code"""
    minutes = payload.get("ttl_minutes", 60)
    content = f'''
    <p style="color: #666666; font-size: 16px;">Use this code to reset your MTBM password:</p>
    {_code_block(payload.get("code", ""))}
    <p style="color: #666666; font-size: 14px;">The code is valid for {minutes} minutes.</p>
    '''
    if app_url:
        content += f'''
    <p style="color: #666666; font-size: 14px;">Enter it at <a href="{escape(app_url)}/forgot-password">{escape(app_url)}/forgot-password</a>.</p>
    '''
    return {
        "subject": "Reset your MTBM password",
        "body": get_base_template(
            content,
            footer_note="If you did not ask to reset your password, you can ignore this email."
        ),
    }


def get_meeting_requested_template(payload: Dict[str, Any], app_url: str = "") -> Dict[str, str]:
    """Template: New meeting request - to the team mailbox"""
    name = payload.get("name", "")
    content = f'''
    <h2 style="color: #5B89B1; margin-top: 0;">New Meeting Request</h2>
    {get_info_card([
        ("Name", name),
        ("Email", payload.get("email", "")),
        ("Phone", payload.get("phone", "")),
        ("Date", payload.get("preferred_date", "")),
        ("Time", payload.get("preferred_time", "")),
        ("Message", payload.get("message", "")),
    ])}
    '''
    return {
        "subject": f"New Meeting Request from {name}",
        "body": get_base_template(content),
    }


def get_meeting_confirmation_template(payload: Dict[str, Any], app_url: str = "") -> Dict[str, str]:
    """Template: Meeting request received - to the visitor"""
    content = f'''
    <h2 style="color: #5B89B1; margin-top: 0;">Thank you, {escape(payload.get("name", ""))}!</h2>
    <p>We've received your meeting request for <strong>{escape(payload.get("preferred_date", ""))}</strong>
       at <strong>{escape(payload.get("preferred_time", ""))}</strong>.</p>
    <p>Our team will confirm the schedule shortly. If you need to reschedule, reply to this email.</p>
    '''
    return {
        "subject": "Meeting Request Received - MTBM",
        "body": get_base_template(content),
    }


TEMPLATE_REGISTRY = {
    EmailTemplateKey.OTP_CODE: get_otp_code_template,
    EmailTemplateKey.PASSWORD_RESET_CODE: get_password_reset_code_template,
    EmailTemplateKey.MEETING_REQUESTED: get_meeting_requested_template,
    EmailTemplateKey.MEETING_CONFIRMATION: get_meeting_confirmation_template,
}


def get_email_template(
    template_key: str,
    payload: Dict[str, Any],
    app_url: str = ""
) -> Dict[str, str]:
    """
    Render a template by key

    Returns:
        Dict with "subject" and "body" (HTML)

    Raises:
        KeyError: If the key is unknown
    """
    key = EmailTemplateKey(template_key)
    return TEMPLATE_REGISTRY[key](payload, app_url)
