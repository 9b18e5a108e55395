"""Observer state for the dashboard: the last document read and the blink frame."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from ..core.store import StatusStore, StoreError
from ..models import StatusDocument, new_status_document
from .render import BLINK_FRAMES, render_mode

logger = logging.getLogger(__name__)


@dataclass
class DashboardState:
    """What the dashboard shows between ticks.

    A failed read replaces the document with an empty default and keeps the
    error, so the standby view can say why nothing is shown.
    """

    document: StatusDocument = field(default_factory=new_status_document)
    error: StoreError | None = None
    frame: int = 0
    last_update: datetime | None = None

    @property
    def mode(self) -> str:
        return render_mode(self.document, self.error)

    def refresh(self, store: StatusStore) -> None:
        """Re-read the status document. Never writes."""
        doc, error = store.load_or_default()
        if error is not None and str(error) != str(self.error):
            logger.debug(f"Status read failed: {error}")
        self.document = doc
        self.error = error
        self.last_update = datetime.now()

    def advance(self) -> None:
        self.frame = (self.frame + 1) % len(BLINK_FRAMES)

    def tick(self, store: StatusStore) -> None:
        """One refresh interval: advance the animation and re-read."""
        self.advance()
        self.refresh(store)
