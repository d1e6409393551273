# profile.py — The user's professional profile and report letterhead
#
# One profile per session, held in memory by ProfileStore. Workflows only
# read it; the profile-edit flow replaces it through ProfileStore.update(),
# which validates first and leaves the current profile alone on failure.

from __future__ import annotations

import base64
import copy
import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any

PROFESSIONS = [
    "Arquiteto e Urbanista",
    "Engenheiro Eletricista",
    "Engenheiro Civil",
    "Técnico em Edificações",
    "Assistente Técnico",
    "Engenheiro Mecânico",
]

HEADER_TEXT_OPTIONS = [
    "Relatório Técnico de Manutenção Predial",
    "Laudo de Vistoria Técnica",
    "Parecer Técnico de Engenharia",
    "Relatório Fotográfico de Anomalias",
    "Checklist de Inspeção Predial",
]

FONT_FAMILIES = {
    "Arial": "Arial, sans-serif",
    "Helvetica": "Helvetica, sans-serif",
    "Times New Roman": "'Times New Roman', serif",
    "Courier New": "'Courier New', monospace",
    "Verdana": "Verdana, sans-serif",
}

FONT_SIZES = ["8pt", "9pt", "10pt", "11pt", "12pt", "13pt", "14pt"]

LOGO_MIME_TYPES = {"image/jpeg", "image/png"}

DEFAULT_FOOTER_TEXT = "Gerado pelo Gestor Predial 4.0"

_CNPJ_PATTERN = re.compile(r"^\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}$")
_ALIGNMENTS = {"left", "center", "right"}


@dataclass
class Letterhead:
    logo: str | None = None
    logo_position: str = "left"
    header_text: str = HEADER_TEXT_OPTIONS[0]
    header_font_family: str = "Helvetica, sans-serif"
    header_font_size: str = "10pt"
    header_text_color: str = "#333333"
    header_text_align: str = "right"
    footer_text: str = DEFAULT_FOOTER_TEXT
    footer_font_family: str = "Helvetica, sans-serif"
    footer_font_size: str = "9pt"
    footer_text_color: str = "#666666"
    footer_text_align: str = "center"


@dataclass
class UserProfile:
    full_name: str = ""
    profession: str = ""
    professional_registry: str = ""
    registration_id: str = ""
    role: str = ""
    public_agency_name: str = ""
    public_agency_address: str = ""
    public_agency_cnpj: str = ""
    letterhead: Letterhead | None = field(default_factory=Letterhead)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _known_fields(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


def letterhead_from_dict(data: dict[str, Any] | None) -> Letterhead | None:
    """Build a letterhead, filling anything missing from the defaults."""
    if data is None:
        return None
    letterhead = Letterhead(**_known_fields(Letterhead, data))
    if letterhead.header_text not in HEADER_TEXT_OPTIONS:
        letterhead.header_text = HEADER_TEXT_OPTIONS[0]
    return letterhead


def profile_from_dict(data: dict[str, Any]) -> UserProfile:
    values = _known_fields(UserProfile, data)
    letterhead = values.pop("letterhead", {})
    profile = UserProfile(**values)
    profile.letterhead = letterhead_from_dict(letterhead)
    return profile


def is_cnpj_valid(cnpj: str) -> bool:
    return cnpj == "" or bool(_CNPJ_PATTERN.match(cnpj))


def format_cnpj(raw: str) -> str:
    """Mask digits as 00.000.000/0000-00 while typing."""
    value = re.sub(r"\D", "", raw or "")
    value = re.sub(r"^(\d{2})(\d)", r"\1.\2", value)
    value = re.sub(r"^(\d{2})\.(\d{3})(\d)", r"\1.\2.\3", value)
    value = re.sub(r"\.(\d{3})(\d)", r".\1/\2", value)
    value = re.sub(r"(\d{4})(\d)", r"\1-\2", value)
    return value[:18]


def logo_data_url(data: bytes, mime_type: str) -> str:
    if mime_type not in LOGO_MIME_TYPES:
        raise ValueError("Por favor, selecione um arquivo .jpg ou .png")
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _text_field_errors(obj: Any, cls: type, optional: tuple[str, ...] = ()) -> list[str]:
    errors: list[str] = []
    for f in fields(cls):
        value = getattr(obj, f.name)
        if f.name == "letterhead" or (f.name in optional and value is None):
            continue
        if not isinstance(value, str):
            errors.append(f"Campo '{f.name}' deve ser texto.")
    return errors


def validate_profile(profile: UserProfile) -> list[str]:
    """Return the problems that block saving; empty means valid."""
    letterhead = profile.letterhead
    errors = _text_field_errors(profile, UserProfile)
    if letterhead is not None:
        errors += _text_field_errors(letterhead, Letterhead, optional=("logo",))
    if errors:
        return errors

    if not profile.full_name.strip():
        errors.append("Nome completo é obrigatório.")
    if profile.profession not in PROFESSIONS:
        errors.append("Selecione uma profissão válida.")
    if not profile.public_agency_name.strip():
        errors.append("Nome do órgão é obrigatório.")
    if not profile.public_agency_address.strip():
        errors.append("Endereço do órgão é obrigatório.")
    if not is_cnpj_valid(profile.public_agency_cnpj):
        errors.append("CNPJ inválido. Use o formato 00.000.000/0000-00.")

    if letterhead is not None:
        if letterhead.logo_position not in {"left", "right"}:
            errors.append("Posição do logo deve ser 'left' ou 'right'.")
        if letterhead.header_text_align not in _ALIGNMENTS or letterhead.footer_text_align not in _ALIGNMENTS:
            errors.append("Alinhamento de texto inválido.")
    return errors


def default_profile() -> UserProfile:
    return UserProfile(
        full_name="Responsável Técnico",
        profession="Arquiteto e Urbanista",
        public_agency_name="Gestor Predial",
        letterhead=Letterhead(),
    )


class ProfileStore:
    """Session-scoped holder of the current profile."""

    def __init__(self, profile: UserProfile | None = None) -> None:
        self._profile = profile if profile is not None else default_profile()

    def get(self) -> UserProfile:
        return self._profile

    def update(self, profile: UserProfile) -> list[str]:
        errors = validate_profile(profile)
        if errors:
            return errors
        self._profile = copy.deepcopy(profile)
        return []
