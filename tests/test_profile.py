from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from predial.identity.profile import (
    HEADER_TEXT_OPTIONS,
    ProfileStore,
    UserProfile,
    format_cnpj,
    is_cnpj_valid,
    letterhead_from_dict,
    logo_data_url,
    profile_from_dict,
    validate_profile,
)


def _valid_profile(**overrides) -> UserProfile:
    values = {
        "full_name": "Ana Souza",
        "profession": "Engenheiro Civil",
        "public_agency_name": "Prefeitura",
        "public_agency_address": "Rua A, 1",
        "public_agency_cnpj": "12.345.678/0001-90",
    }
    values.update(overrides)
    return UserProfile(**values)


class ProfileTests(unittest.TestCase):
    def test_cnpj_mask_and_validation(self) -> None:
        self.assertEqual(format_cnpj("12345678000190"), "12.345.678/0001-90")
        self.assertEqual(format_cnpj("12.3a45"), "12.345")
        self.assertTrue(is_cnpj_valid("12.345.678/0001-90"))
        self.assertTrue(is_cnpj_valid(""))
        self.assertFalse(is_cnpj_valid("12345678000190"))

    def test_validate_profile(self) -> None:
        self.assertEqual(validate_profile(_valid_profile()), [])

        errors = validate_profile(_valid_profile(full_name=" ", profession="Astronauta", public_agency_cnpj="1"))
        self.assertEqual(len(errors), 3)

    def test_non_text_fields_rejected(self) -> None:
        profile = profile_from_dict({
            **_valid_profile().to_dict(),
            "role": 7,
            "letterhead": {"header_font_size": 12, "logo": None},
        })
        errors = validate_profile(profile)
        self.assertEqual(errors, ["Campo 'role' deve ser texto.", "Campo 'header_font_size' deve ser texto."])

        store = ProfileStore()
        before = store.get()
        self.assertTrue(store.update(profile))
        self.assertIs(store.get(), before)

        logo_bytes = profile_from_dict({**_valid_profile().to_dict(), "letterhead": {"logo": b"\x89PNG"}})
        self.assertEqual(validate_profile(logo_bytes), ["Campo 'logo' deve ser texto."])

    def test_letterhead_from_dict_defaults(self) -> None:
        letterhead = letterhead_from_dict({"logo_position": "right", "header_text": "Outro", "extra": 1})
        self.assertEqual(letterhead.logo_position, "right")
        self.assertEqual(letterhead.header_text, HEADER_TEXT_OPTIONS[0])
        self.assertEqual(letterhead.footer_font_size, "9pt")
        self.assertIsNone(letterhead_from_dict(None))

    def test_profile_from_dict_round_trip(self) -> None:
        profile = _valid_profile()
        self.assertEqual(profile_from_dict(profile.to_dict()), profile)

    def test_logo_data_url(self) -> None:
        self.assertEqual(logo_data_url(b"\x89PNG", "image/png"), "data:image/png;base64,iVBORw==")
        with self.assertRaises(ValueError):
            logo_data_url(b"GIF89a", "image/gif")


class ProfileStoreTests(unittest.TestCase):
    def test_invalid_update_leaves_profile(self) -> None:
        store = ProfileStore()
        before = store.get()

        errors = store.update(_valid_profile(full_name=""))
        self.assertTrue(errors)
        self.assertIs(store.get(), before)

    def test_valid_update_stores_a_copy(self) -> None:
        store = ProfileStore()
        profile = _valid_profile()

        self.assertEqual(store.update(profile), [])
        profile.letterhead.header_text = "mudado depois"
        self.assertEqual(store.get().full_name, "Ana Souza")
        self.assertEqual(store.get().letterhead.header_text, HEADER_TEXT_OPTIONS[0])


if __name__ == "__main__":
    unittest.main()
