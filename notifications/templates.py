"""
Shared Email Template Components

Single source of truth for voting email design. Every builder returns
table rows meant to sit between email_wrapper_start() and
email_wrapper_end(). Callers escape user-supplied text before passing it in.
"""

from typing import List, Tuple

DARK_MODE_CSS = """
    <style>
        :root {
            color-scheme: light dark;
            supported-color-schemes: light dark;
        }
        @media (prefers-color-scheme: dark) {
            body, table { background-color: #1a1a1a !important; }
            td[style*="background-color: #ffffff"] { background-color: #1e293b !important; }
            td[style*="background-color: #f9fafb"],
            div[style*="background-color: #f8fafc"] { background-color: #0f172a !important; }
            p[style*="color: #111827"],
            td[style*="color: #111827"] { color: #e2e8f0 !important; }
            p[style*="color: #374151"],
            td[style*="color: #6b7280"] { color: #cbd5e1 !important; }
        }
    </style>
"""


def email_wrapper_start(title: str) -> str:
    """Start of email HTML structure with dark mode support"""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="color-scheme" content="light dark">
    <title>{title}</title>
{DARK_MODE_CSS}
</head>
<body style="margin: 0; padding: 0; background-color: #f3f4f6; font-family: system-ui, -apple-system, 'Segoe UI', sans-serif;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color: #f3f4f6;">
        <tr>
            <td align="center" style="padding: 24px;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" style="max-width: 600px; background-color: #ffffff; border-radius: 16px;">"""


def email_wrapper_end() -> str:
    """End of email HTML structure"""
    return """
                </table>
            </td>
        </tr>
    </table>
</body>
</html>"""


def header_section(org_name: str, title: str, subtitle: str = "") -> str:
    """Branded gradient header"""
    subtitle_html = f"""
                            <p style="margin: 6px 0 0 0; font-size: 13px; color: #ffffff; opacity: 0.92;">
                                {subtitle}
                            </p>""" if subtitle else ""

    return f"""
                    <tr>
                        <td style="padding: 22px 24px; background: linear-gradient(135deg, #4f46e5, #9333ea); border-radius: 16px 16px 0 0;">
                            <p style="margin: 0; font-size: 12px; color: #ffffff; opacity: 0.9; letter-spacing: 0.4px;">{org_name} Voting</p>
                            <h1 style="margin: 6px 0 0 0; font-size: 20px; font-weight: 800; color: #ffffff; line-height: 1.2;">
                                {title}
                            </h1>{subtitle_html}
                        </td>
                    </tr>"""


def footer_section(org_name: str) -> str:
    return f"""
                    <tr>
                        <td style="padding: 12px 18px; border-top: 1px solid #e5e7eb; text-align: center; background-color: #f9fafb; border-radius: 0 0 16px 16px;">
                            <p style="margin: 0; font-size: 11px; color: #9ca3af;">
                                {org_name} Voting System &bull; Internal use only
                            </p>
                        </td>
                    </tr>"""


def text_content(text: str, color: str = "#374151", size: int = 14) -> str:
    """Paragraph row"""
    return f"""
                    <tr>
                        <td style="padding: 0 24px 12px 24px;">
                            <p style="margin: 0; font-size: {size}px; line-height: 1.55; color: {color};">
                                {text}
                            </p>
                        </td>
                    </tr>"""


def simple_button(url: str, text: str) -> str:
    """Centered CTA button followed by a copy-paste fallback link"""
    return f"""
                    <tr>
                        <td align="center" style="padding: 20px 24px 16px 24px;">
                            <a href="{url}" style="display: inline-block; padding: 10px 20px; background: linear-gradient(135deg, #6366f1, #a855f7); color: #ffffff; text-decoration: none; border-radius: 999px; font-size: 14px; font-weight: 600;">
                                {text}
                            </a>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 0 24px 16px 24px;">
                            <p style="margin: 0; font-size: 12px; color: #6b7280; word-break: break-all;">
                                Or copy and paste this link into your browser:<br>
                                <span style="font-family: monospace; font-size: 11px; color: #111827;">{url}</span>
                            </p>
                        </td>
                    </tr>"""


def nominee_preview_block(names: List[str], remaining: int) -> str:
    """Boxed nominee list; names already formatted and escaped"""
    if not names:
        return ""

    items = "".join(f"<li>{name}</li>" for name in names)
    more = f"""
                                    <li style="list-style: none; margin-top: 6px; color: #6b7280;">and {remaining} others</li>""" if remaining > 0 else ""

    return f"""
                    <tr>
                        <td style="padding: 0 24px 16px 24px;">
                            <div style="padding: 12px 14px; border-radius: 12px; background-color: #f8fafc; border: 1px solid #e5e7eb;">
                                <p style="margin: 0 0 8px 0; font-weight: 700; font-size: 13px; color: #111827;">Nominees for this cycle</p>
                                <ul style="padding-left: 18px; margin: 0; font-size: 13px; color: #374151; line-height: 1.55;">{items}{more}
                                </ul>
                            </div>
                        </td>
                    </tr>"""


def congrats_block() -> str:
    return """
                    <tr>
                        <td style="padding: 0 24px 16px 24px;">
                            <div style="padding: 14px; border-radius: 14px; background-color: #ecfdf5; border: 1px solid #a7f3d0;">
                                <p style="margin: 0; font-size: 14px; color: #065f46; font-weight: 700;">Congratulations!</p>
                                <p style="margin: 6px 0 0 0; font-size: 13px; color: #065f46;">
                                    You are listed as a winner in this cycle for at least one store.
                                </p>
                            </div>
                        </td>
                    </tr>"""


def results_table(rows: List[Tuple[str, str, bool]]) -> str:
    """Store / winner table

    Args:
        rows: (store label, winner cell, is_placeholder) tuples; placeholder
              cells are rendered muted and italic
    """
    body = []
    for store, winner, placeholder in rows:
        winner_html = (
            f'<em style="color: #6b7280;">{winner}</em>' if placeholder else winner
        )
        body.append(f"""
                                    <tr>
                                        <td style="padding: 12px 14px; border-bottom: 1px solid #eef2f7; color: #111827; font-size: 13px;">{store}</td>
                                        <td style="padding: 12px 14px; border-bottom: 1px solid #eef2f7; color: #111827; font-size: 13px;">{winner_html}</td>
                                    </tr>""")

    header_style = "padding: 12px 14px; font-size: 12px; color: #6b7280; text-transform: uppercase; letter-spacing: 0.5px; border-bottom: 1px solid #eef2f7;"
    return f"""
                    <tr>
                        <td style="padding: 0 24px 16px 24px;">
                            <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="border-collapse: collapse; border: 1px solid #e5e7eb;">
                                <thead>
                                    <tr style="background-color: #f9fafb;">
                                        <th align="left" style="{header_style}">Store</th>
                                        <th align="left" style="{header_style}">Winner</th>
                                    </tr>
                                </thead>
                                <tbody>{"".join(body)}
                                </tbody>
                            </table>
                        </td>
                    </tr>"""
