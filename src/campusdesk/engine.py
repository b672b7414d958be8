import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from campusdesk.config import Settings
from campusdesk.database.directory import CampusDirectory
from campusdesk.dispatch.chat_log import ChatLog
from campusdesk.dispatch.dispatcher import IntentDispatcher
from campusdesk.dispatch.handlers import IntentHandlers
from campusdesk.faq.aggregator import SourceAggregator
from campusdesk.faq.keywords import KeywordResolver, KeywordStore, LocalKeywordFile, SheetKeywordFeed
from campusdesk.faq.resolver import FaqResolver
from campusdesk.faq.scoring import ScoringWeights
from campusdesk.faq.sources import ColumnSheetSource, DirectoryFaqSource, HeaderSheetSource, LocalFileSource
from campusdesk.services.sheets import SheetsClient

log = logging.getLogger(__name__)


@dataclass
class ResolutionEngine:
    aggregator: SourceAggregator
    faq_resolver: FaqResolver
    keyword_store: KeywordStore
    keyword_resolver: KeywordResolver
    dispatcher: IntentDispatcher
    chat_log: ChatLog

    async def warm_up(self) -> None:
        await self.aggregator.load_all()
        await self.keyword_store.ensure_loaded()

    async def refresh_all(self) -> Dict[str, int]:
        faqs = await self.aggregator.refresh()
        keywords = await self.keyword_store.refresh()
        log.info("Manual refresh: %d FAQs, %d keyword FAQs", faqs, keywords)
        return {"faqs": faqs, "keywords": keywords}

    def stats(self) -> Dict[str, Any]:
        return {
            "faq_cache": self.aggregator.stats(),
            "keyword_cache": self.keyword_store.stats(),
            "chat_logs": self.chat_log.stats(),
        }


def build_engine(settings: Settings, directory: Optional[CampusDirectory] = None) -> ResolutionEngine:
    directory = directory or CampusDirectory()
    sheets = SheetsClient(api_key=settings.google_api_key, timeout=settings.source_fetch_timeout_s)

    aggregator = SourceAggregator(
        [
            LocalFileSource(settings.local_faq_path),
            DirectoryFaqSource(directory),
            HeaderSheetSource(sheets, settings.faq_sheet_a_id, settings.faq_sheet_a_range),
            ColumnSheetSource(sheets, settings.faq_sheet_b_id, settings.faq_sheet_b_range),
        ],
        ttl=settings.faq_cache_ttl_s,
        fetch_timeout=settings.source_fetch_timeout_s,
    )
    faq_resolver = FaqResolver(
        aggregator,
        min_score=settings.faq_min_score,
        weights=ScoringWeights(
            containment_bonus=settings.containment_bonus,
            answer_weight=settings.answer_weight,
        ),
    )

    keyword_store = KeywordStore(
        [
            LocalKeywordFile(settings.local_keyword_path),
            SheetKeywordFeed(sheets, settings.keyword_sheet_id, settings.keyword_sheet_range),
        ],
        fetch_timeout=settings.source_fetch_timeout_s,
    )
    keyword_resolver = KeywordResolver(keyword_store, fuzzy_threshold=settings.keyword_fuzzy_threshold)

    chat_log = ChatLog()
    dispatcher = IntentDispatcher(
        IntentHandlers(directory).table(),
        [
            ("faq", faq_resolver.answer),
            ("keyword", keyword_resolver.answer),
        ],
        chat_log=chat_log,
    )

    return ResolutionEngine(
        aggregator=aggregator,
        faq_resolver=faq_resolver,
        keyword_store=keyword_store,
        keyword_resolver=keyword_resolver,
        dispatcher=dispatcher,
        chat_log=chat_log,
    )
