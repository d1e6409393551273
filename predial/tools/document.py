# document.py — Letterhead-branded printable report assembly
#
# Pure templating: (fragments, letterhead, metadata) → one HTML document.
# The header and footer bands are fixed-position so the print engine repeats
# them on every page; the @page margins keep body text clear of them.
#
# Fragments are trusted HTML (already cut down by the parser). Everything
# else that comes from the user is escaped.

from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import date

from predial.identity.profile import Letterhead, UserProfile

PAGE_BREAK = '<div style="page-break-before: always;"></div>'

SIGNATURE_FULL = "full"
SIGNATURE_RESPONSIBLE = "responsible"

BASE_CSS = """
@page {
  size: A4;
  margin: 3cm 2cm 2cm 2cm;
}
body {
  margin: 0;
  padding: 0;
  font-family: 'Helvetica Neue', 'Helvetica', 'Arial', sans-serif;
  font-size: 11pt;
  line-height: 1.5;
  color: #333;
}
.page-header, .page-footer {
  position: fixed;
  left: 0;
  right: 0;
  padding-left: 2cm;
  padding-right: 2cm;
  box-sizing: border-box;
  line-height: 1.4;
}
.page-header {
  top: -3cm;
  height: 3cm;
  padding-top: 1cm;
  padding-bottom: 0.5cm;
  border-bottom: 1px solid #ddd;
}
.header-content {
  display: flex;
  align-items: center;
  justify-content: space-between;
}
.header-content.logo-right { flex-direction: row-reverse; }
.logo { max-height: 1.5cm; max-width: 5cm; flex-shrink: 0; }
.header-content:not(.logo-right) .logo { margin-right: 1cm; }
.header-content.logo-right .logo { margin-left: 1cm; }
.header-text { flex-grow: 1; white-space: pre-wrap; }
.page-footer {
  bottom: -2cm;
  height: 2cm;
  padding-bottom: 1cm;
  padding-top: 0.5cm;
  border-top: 1px solid #ddd;
}
main { page-break-before: auto; }
h1 { font-size: 20pt; text-align: center; margin-bottom: 1.5cm; font-weight: bold; page-break-after: avoid; }
.info-section { margin-bottom: 25px; border: 1px solid #ccc; padding: 15px; border-radius: 8px; background-color: #f8fafc; page-break-inside: avoid; }
.info-section p { margin: 5px 0; }
.signature { margin-top: 80px; text-align: center; page-break-inside: avoid; }
.signature p { text-align: center; margin: 2px 0; }
"""


class MissingBrandingError(ValueError):
    """Raised when a report is requested without a letterhead configured."""


@dataclass(frozen=True)
class Signatory:
    full_name: str
    profession: str = ""
    professional_registry: str = ""
    registration_id: str = ""
    role: str = ""


@dataclass(frozen=True)
class ReportMetadata:
    title: str
    heading: str = ""
    info: tuple[tuple[str, str], ...] = ()
    signatory: Signatory | None = None
    extra_css: str = ""
    signature_style: str = SIGNATURE_FULL


def signatory_from_profile(profile: UserProfile) -> Signatory:
    return Signatory(
        full_name=profile.full_name,
        profession=profile.profession,
        professional_registry=profile.professional_registry,
        registration_id=profile.registration_id,
        role=profile.role,
    )


def format_date(value: date | None = None) -> str:
    """dd/mm/yyyy, the way reports print dates."""
    return (value or date.today()).strftime("%d/%m/%Y")


def _multiline(text: str) -> str:
    return html.escape(text).replace("\n", "<br>")


def _header_html(letterhead: Letterhead) -> str:
    classes = "header-content logo-right" if letterhead.logo_position == "right" else "header-content"
    logo = f'<img src="{html.escape(letterhead.logo)}" class="logo" alt="Logo">' if letterhead.logo else ""
    style = (
        f"text-align: {html.escape(letterhead.header_text_align)}; "
        f"font-family: {html.escape(letterhead.header_font_family)}; "
        f"font-size: {html.escape(letterhead.header_font_size)}; "
        f"color: {html.escape(letterhead.header_text_color)};"
    )
    return (
        '<div class="page-header">\n'
        f'  <div class="{classes}">\n'
        f"    {logo}\n"
        f'    <div class="header-text" style="{style}">{_multiline(letterhead.header_text)}</div>\n'
        "  </div>\n"
        "</div>"
    )


def _footer_html(letterhead: Letterhead) -> str:
    style = (
        f"text-align: {html.escape(letterhead.footer_text_align)}; "
        f"font-family: {html.escape(letterhead.footer_font_family)}; "
        f"font-size: {html.escape(letterhead.footer_font_size)}; "
        f"color: {html.escape(letterhead.footer_text_color)};"
    )
    return f'<div class="page-footer" style="{style}">{_multiline(letterhead.footer_text)}</div>'


def _info_html(info: tuple[tuple[str, str], ...]) -> str:
    if not info:
        return ""
    lines = [
        f"  <p><strong>{html.escape(label)}:</strong> {html.escape(value)}</p>"
        for label, value in info
    ]
    return '<div class="info-section">\n' + "\n".join(lines) + "\n</div>"


def _signature_html(signatory: Signatory | None, style: str) -> str:
    if signatory is None:
        return ""

    name = html.escape(signatory.full_name)
    if style == SIGNATURE_RESPONSIBLE:
        return (
            '<div class="signature">\n'
            "  <p><strong>Responsável pela Vistoria:</strong></p>\n"
            "  <br><br>\n"
            "  <p>_________________________________________</p>\n"
            f"  <p><strong>{name}</strong></p>\n"
            "</div>"
        )

    lines = [
        "  <p>_________________________________________</p>",
        f"  <p><strong>{name}</strong></p>",
        f"  <p>{html.escape(signatory.profession)}</p>",
    ]
    if signatory.professional_registry:
        lines.append(f"  <p>Registro: {html.escape(signatory.professional_registry)}</p>")
    if signatory.registration_id:
        lines.append(f"  <p>Matrícula: {html.escape(signatory.registration_id)}</p>")
    if signatory.role:
        lines.append(f"  <p>Função: {html.escape(signatory.role)}</p>")
    return '<div class="signature">\n' + "\n".join(lines) + "\n</div>"


def render_document(
    fragments: list[str] | tuple[str, ...],
    letterhead: Letterhead | None,
    metadata: ReportMetadata,
) -> str:
    """Assemble a complete printable HTML document.

    ``fragments`` are placed in order inside <main>; ``PAGE_BREAK`` entries
    force the next fragment onto a new page. Raises MissingBrandingError when
    no letterhead is configured.
    """
    if letterhead is None:
        raise MissingBrandingError("Não foi possível gerar o PDF. Configure o papel timbrado no seu perfil.")

    heading = metadata.heading or metadata.title
    body_parts = [f"<h1>{html.escape(heading)}</h1>"]
    info = _info_html(metadata.info)
    if info:
        body_parts.append(info)
    body_parts.extend(fragments)
    signature = _signature_html(metadata.signatory, metadata.signature_style)
    if signature:
        body_parts.append(signature)

    body = "\n".join(body_parts)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{html.escape(metadata.title)}</title>\n"
        f"<style>{BASE_CSS}{metadata.extra_css}</style>\n"
        "</head>\n"
        "<body>\n"
        f"{_header_html(letterhead)}\n"
        f"{_footer_html(letterhead)}\n"
        f"<main>\n{body}\n</main>\n"
        "</body>\n"
        "</html>\n"
    )
