from campusdesk.dispatch.chat_log import ChatLog, ChatLogEntry


def _entry(intent="FAQIntent", source="faq", latency=10.0, **kwargs):
    return ChatLogEntry(query="q", response="a", intent=intent, match_source=source, latency_ms=latency, **kwargs)


def test_empty_log_reports_zeros():
    assert ChatLog().stats() == {
        "total": 0,
        "avg_latency_ms": 0,
        "error_count": 0,
        "unanswered": 0,
        "intents": {},
        "sources": {},
    }


def test_stats_aggregate_recent_entries():
    log = ChatLog()
    log.record(_entry(latency=10.0))
    log.record(_entry(intent="FinanceIntent", source="error", latency=21.0, error="db down"))
    log.record(_entry(source="none", latency=30.0))

    stats = log.stats()

    assert stats["total"] == 3
    assert stats["avg_latency_ms"] == 20
    assert stats["error_count"] == 1
    assert stats["unanswered"] == 1
    assert stats["intents"] == {"FAQIntent": 2, "FinanceIntent": 1}
    assert stats["sources"] == {"faq": 1, "error": 1, "none": 1}


def test_oldest_entries_fall_off():
    log = ChatLog(max_logs=2)
    for intent in ("first", "second", "third"):
        log.record(_entry(intent=intent))

    assert len(log) == 2
    assert [e.intent for e in log.recent()] == ["third", "second"]
    assert log.recent(limit=1)[0].intent == "third"
