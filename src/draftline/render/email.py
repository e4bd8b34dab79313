"""Email-safe newsletter shell and the built-in template catalog."""

from __future__ import annotations

import html

from draftline.models import TemplateDocument
from draftline.render.sanitizer import EMAIL_POLICY, sanitize

DEFAULT_FOOTER_TEXT = "You are receiving this email because you subscribed to our newsletter."
DEFAULT_UNSUBSCRIBE_TEXT = "Unsubscribe"

_EMAIL_SHELL = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{subject}</title>
</head>
<body style="margin:0;padding:0;background:#f1f5f9;font-family:Arial,Helvetica,sans-serif;color:#0f172a;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" border="0" style="background:#f1f5f9;padding:24px 0;">
    <tr>
      <td align="center">
        <table role="presentation" width="600" cellspacing="0" cellpadding="0" border="0" style="width:600px;max-width:600px;background:#ffffff;border:1px solid #e2e8f0;border-radius:12px;overflow:hidden;">
          <tr>
            <td style="padding:20px 24px;background:#0f172a;color:#ffffff;">
              <div style="font-size:18px;font-weight:700;line-height:1.2;">{subject}</div>
            </td>
          </tr>
          <tr>
            <td style="padding:24px;">
              <div style="font-size:14px;line-height:1.7;color:#0f172a;">
                {content}
              </div>
            </td>
          </tr>
          <tr>
            <td style="padding:18px 24px;background:#f8fafc;border-top:1px solid #e2e8f0;">
              <div style="font-size:12px;line-height:1.5;color:#475569;">
                {footer_text}
              </div>
              <div style="font-size:12px;line-height:1.5;color:#475569;margin-top:8px;">
                <a href="{unsubscribe_url}" style="color:#2563eb;text-decoration:underline;">{unsubscribe_text}</a>
              </div>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def build_email_html(
    subject: str,
    content_html: str,
    *,
    footer_text: str = DEFAULT_FOOTER_TEXT,
    unsubscribe_url: str = "#",
    unsubscribe_text: str = DEFAULT_UNSUBSCRIBE_TEXT,
) -> str:
    """Wrap a newsletter body in the email-safe shell.

    The body is sanitized with the email policy here, so the shell never
    embeds unsanitized markup; the subject and footer are escaped text.
    """
    return _EMAIL_SHELL.format(
        subject=html.escape(subject or ""),
        content=sanitize(content_html or "", EMAIL_POLICY),
        footer_text=html.escape(footer_text),
        unsubscribe_url=html.escape(unsubscribe_url, quote=True),
        unsubscribe_text=html.escape(unsubscribe_text),
    )


BUILTIN_TEMPLATES: tuple[TemplateDocument, ...] = (
    TemplateDocument(
        id="elegant-header",
        name="Elegant Header",
        description="Classic layout with a gold header band and navy headings.",
        subject="Monthly Bulletin - {{month}}",
        html=(
            '<div style="background-color:#D4A838;padding:40px 30px;text-align:center;">'
            '<h1 style="color:#152A3D;font-size:28px;margin:0;">{{brand}}</h1>'
            "</div>"
            '<div style="padding:40px 30px;">'
            '<h2 style="color:#152A3D;font-size:24px;">{{title}}</h2>'
            '<p style="color:#5E5E5E;font-size:16px;line-height:1.7;">{{content}}</p>'
            '<div style="background-color:#FAFAFA;border-left:4px solid #D4A838;padding:20px;">'
            "<strong>Tip:</strong> {{tip}}"
            "</div>"
            '<p style="text-align:center;"><a href="{{ctaLink}}">{{ctaText}}</a></p>'
            "</div>"
        ),
    ),
    TemplateDocument(
        id="minimal-clean",
        name="Minimal Clean",
        description="Minimal layout focused on the content with subtle accents.",
        subject="Updates - {{date}}",
        html=(
            '<div style="padding:50px 40px 30px;text-align:center;border-bottom:3px solid #D4A838;">'
            '<h1 style="color:#152A3D;font-size:32px;margin:0;">{{brand}}</h1>'
            "</div>"
            '<div style="padding:40px;">'
            '<h2 style="color:#152A3D;font-size:22px;">{{title}}</h2>'
            '<p style="color:#5E5E5E;font-size:15px;line-height:1.8;">{{intro}}</p>'
            '<h3 style="color:#152A3D;font-size:18px;">{{section1Title}}</h3>'
            "<p>{{section1Content}}</p>"
            '<h3 style="color:#152A3D;font-size:18px;">{{section2Title}}</h3>'
            "<p>{{section2Content}}</p>"
            '<p style="text-align:center;"><a href="{{ctaLink}}">{{ctaText}}</a></p>'
            "</div>"
        ),
    ),
    TemplateDocument(
        id="announcement",
        name="Announcement",
        description="Single headline announcement with one call to action.",
        subject="{{headline}}",
        html=(
            '<div style="padding:40px;text-align:center;">'
            '<h1 style="color:#152A3D;font-size:30px;">{{headline}}</h1>'
            '<p style="color:#5E5E5E;font-size:16px;line-height:1.7;">{{content}}</p>'
            '<p><a href="{{ctaLink}}">{{ctaText}}</a></p>'
            "</div>"
        ),
    ),
)


def get_template(template_id: str) -> TemplateDocument:
    """Look up a built-in template by id.

    Raises:
        KeyError: If no built-in template has that id.
    """
    for template in BUILTIN_TEMPLATES:
        if template.id == template_id:
            return template
    raise KeyError(template_id)
