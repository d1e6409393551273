# base.py — What every tool workflow shares
#
# A workflow moves through:
#   idle → selecting → requesting (loading) → result | failed → exporting
#
# One request at a time per workflow: a second request while one is in
# flight is refused, not queued. reset() puts everything back to idle and
# bumps a generation counter, so a response that lands after the reset is
# thrown away instead of leaking into the next session.
#
# Expected failures never raise out of here. They become notices.

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from predial.engine.service import AIConfigurationError, AIServiceError
from predial.identity.profile import ProfileStore, UserProfile
from predial.knowledge.catalog import Catalog, get_catalog, typology_id
from predial.messaging.notices import Notices
from predial.tools.document import MissingBrandingError, ReportMetadata, render_document
from predial.tools.export import ExportSurface, ExportUnavailableError
from predial.tools.selection import SelectionTracker

logger = logging.getLogger(__name__)

IDLE = "idle"
SELECTING = "selecting"
REQUESTING = "requesting"
RESULT = "result"
FAILED = "failed"
EXPORTING = "exporting"

EXPORT_UNAVAILABLE_MESSAGE = "Não foi possível abrir a janela de impressão."
REQUIRED_FIELDS_MESSAGE = "Por favor, preencha todos os campos obrigatórios."


class Workflow:
    name = ""
    title = ""
    FORM_FIELDS: tuple[str, ...] = ()
    # action name (API) → coroutine method name
    ACTIONS: dict[str, str] = {}
    # used in the "data missing" export message
    REPORT_SUBJECT = "relatório"

    def __init__(
        self,
        ai,
        notices: Notices,
        profiles: ProfileStore,
        catalog: Catalog | None = None,
    ) -> None:
        self.ai = ai
        self.notices = notices
        self.profiles = profiles
        self._catalog = catalog
        self.phase = IDLE
        self.loading = False
        self._generation = 0
        self.form: dict[str, str] = {name: "" for name in self.FORM_FIELDS}
        self.last_export: str | None = None

    @property
    def catalog(self) -> Catalog:
        return get_catalog() if self._catalog is None else self._catalog

    # -- state ---------------------------------------------------------------

    def reset(self) -> None:
        self._generation += 1
        self.phase = IDLE
        self.loading = False
        self.form = {name: "" for name in self.FORM_FIELDS}
        self.last_export = None
        self._clear_state()

    def _clear_state(self) -> None:
        """Drop results and anything else the subclass keeps."""

    def _touch(self) -> None:
        if self.phase == IDLE:
            self.phase = SELECTING

    def update_form(self, field: str, value: str) -> None:
        if field not in self.FORM_FIELDS:
            raise ValueError(f"Unknown field for {self.name}: {field}")
        self.form[field] = value if isinstance(value, str) else str(value)
        self._touch()

    def has_result(self) -> bool:
        return False

    def result_snapshot(self) -> dict[str, Any]:
        return {}

    def snapshot(self) -> dict[str, Any]:
        return {
            "tool": self.name,
            "title": self.title,
            "phase": self.phase,
            "loading": self.loading,
            "form": dict(self.form),
            "actions": sorted(self.ACTIONS),
            **self.result_snapshot(),
        }

    # -- requests ------------------------------------------------------------

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _busy(self) -> bool:
        if self.loading:
            logger.info("%s: request refused, another one is in flight", self.name)
            return True
        return False

    async def _request(
        self,
        call: Callable[[], Awaitable[str]],
        error_message: str,
    ) -> str | None:
        """Run one AI call under the single-in-flight guard.

        Returns the raw response text, or None when the call was refused,
        failed, or outlived a reset. Anything other than an AI error propagates.
        """
        if self._busy():
            return None

        generation = self._generation
        self.loading = True
        self.phase = REQUESTING
        try:
            text = await call()
        except (AIConfigurationError, AIServiceError) as exc:
            if self._is_stale(generation):
                logger.debug("%s: dropping failure from before reset: %s", self.name, exc)
                return None
            self.phase = FAILED
            self.notices.error(str(exc) or error_message)
            return None
        except Exception:
            if not self._is_stale(generation):
                self.phase = FAILED
            raise
        finally:
            if not self._is_stale(generation):
                self.loading = False

        if self._is_stale(generation):
            logger.debug("%s: dropping response that arrived after reset", self.name)
            return None
        return text

    def _succeed(self, message: str) -> None:
        self.phase = RESULT
        self.notices.success(message)

    # -- export --------------------------------------------------------------

    def missing_data_message(self) -> str:
        return f"Não foi possível gerar o PDF. Dados do perfil ou do {self.REPORT_SUBJECT} estão faltando."

    def export_ready(self) -> bool:
        return self.has_result()

    def missing_result_message(self) -> str:
        return self.missing_data_message()

    def report_fragments(self) -> list[str]:
        raise NotImplementedError

    def report_metadata(self, profile: UserProfile) -> ReportMetadata:
        raise NotImplementedError

    def export(self, surface: ExportSurface | None = None) -> str | None:
        """Render the report and hand it to ``surface`` (if any).

        Returns the document, or None when a precondition failed or the
        surface could not be opened; the reason is posted as a notice.
        """
        if not self.export_ready():
            self.notices.error(self.missing_result_message())
            return None

        profile = self.profiles.get()
        if profile is None or profile.letterhead is None:
            self.notices.error(self.missing_data_message())
            return None

        previous = self.phase
        self.phase = EXPORTING
        try:
            metadata = self.report_metadata(profile)
            document = render_document(self.report_fragments(), profile.letterhead, metadata)
            if surface is not None:
                self.last_export = surface.open(document, metadata.title)
                logger.info("%s: report exported to %s", self.name, self.last_export)
        except MissingBrandingError as exc:
            self.notices.error(str(exc))
            return None
        except ExportUnavailableError as exc:
            logger.warning("%s: export surface unavailable: %s", self.name, exc)
            self.notices.error(EXPORT_UNAVAILABLE_MESSAGE)
            return None
        finally:
            self.phase = previous
        return document


class SelectionWorkflow(Workflow):
    """A workflow driven by checked (system, typology) pairs."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.selection = SelectionTracker()

    def _clear_state(self) -> None:
        self.selection.reset()

    def select(self, system_key: str, typology_title: str, checked: bool) -> None:
        self.selection.set_checked(system_key, typology_id(typology_title), checked)
        self._touch()

    def selected_labels(self) -> list[str]:
        return self.selection.flatten_selected_labels(self.catalog)

    def required_fields_filled(self) -> bool:
        return all(self.form[name].strip() for name in self.FORM_FIELDS)

    def is_form_valid(self) -> bool:
        return self.required_fields_filled() and self.selection.is_any_selected()

    def snapshot(self) -> dict[str, Any]:
        state = super().snapshot()
        state["selection"] = self.selection.as_dict()
        state["selected_labels"] = self.selected_labels()
        return state
