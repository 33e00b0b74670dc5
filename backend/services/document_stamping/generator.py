"""
Document Generator
==================
Boundary of the stamping engine.

Operations:
1. stamp_receive_number - registry box on an incoming document
2. stamp_command        - command text and signature block
3. compose_leave_form   - single-page leave request
4. compose_leave_summary - multi-page leave report

Every operation returns a PDF as a data-URI EncodedBlob.
"""

from typing import Optional

from core.config import Settings, get_settings
from core.logger import get_logger
from .codec import PDF_MEDIA_TYPE, encode
from .errors import FontUnavailable
from .fonts import AssetCache, FontCache
from .leave_form import LeaveFormComposer
from .leave_summary import LeaveSummaryComposer
from .models import (
    CommandStampRequest,
    EncodedBlob,
    LeaveFormRequest,
    ReceiveNumberRequest,
    SummaryReportRequest,
)
from .stamp_service import StampService

log = get_logger(__name__)


class DocumentGenerator:
    """
    Stamps and composes official documents.

    The font and asset caches are shared by all operations; pass your own
    (e.g. FontCache.preloaded) to run without network access.
    """

    def __init__(
        self,
        fonts: Optional[FontCache] = None,
        assets: Optional[AssetCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.assets = assets or AssetCache(timeout=self.settings.fetch_timeout)
        self.fonts = fonts or FontCache.from_settings(self.settings, self.assets)

        self.stamp_service = StampService(self.fonts)
        self.leave_form = LeaveFormComposer(self.fonts, self.assets, self.settings.emblem_url)
        self.leave_summary = LeaveSummaryComposer(self.fonts, self.assets, self.settings.emblem_url)

    def stamp_receive_number(self, request: ReceiveNumberRequest) -> EncodedBlob:
        return encode(self.stamp_service.stamp_receive_number(request), PDF_MEDIA_TYPE)

    def stamp_command(self, request: CommandStampRequest) -> EncodedBlob:
        return encode(self.stamp_service.stamp_command(request), PDF_MEDIA_TYPE)

    def compose_leave_form(self, request: LeaveFormRequest) -> EncodedBlob:
        return encode(self.leave_form.compose(request), PDF_MEDIA_TYPE)

    def compose_leave_summary(self, request: SummaryReportRequest) -> EncodedBlob:
        return encode(self.leave_summary.compose(request), PDF_MEDIA_TYPE)

    def warm_up(self) -> bool:
        """Load the font ahead of the first request. False if it failed."""
        try:
            self.fonts.warm()
        except FontUnavailable as e:
            log.warning(f"Font warm-up failed, will retry on first use: {e}")
            return False
        return True
